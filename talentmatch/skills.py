"""
Skill taxonomy resolution and skill scoring.

Responsibilities:
- Canonicalize free-text skill names against a synonym table.
- Decide whether two skill names refer to the same skill.
- Score a candidate's skill set against a posting's requirements.

Non-Responsibilities:
- No location or experience logic.
- No schema validation (proficiency values are assumed numeric).

Invariant:
Unknown skills are never an error; they are their own canonical form.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .normalize import normalize_text

DEFAULT_SYNONYMS: Mapping[str, Sequence[str]] = MappingProxyType({
    "react": ("react.js", "reactjs", "react-js", "reactjsx"),
    "node.js": ("nodejs", "node", "node-js"),
    "javascript": ("js", "ecmascript", "javascript es6"),
    "typescript": ("ts", "typescript es6"),
    "python": ("py", "python3", "python 3"),
    "java": ("java 8", "java 11", "java 17"),
    "c++": ("cpp", "c plus plus"),
    "c#": ("csharp", "c-sharp", "dotnet"),
    ".net": ("dotnet", "asp.net"),
    "html": ("html5", "html 5"),
    "css": ("css3", "css 3", "scss", "sass"),
    "sql": ("mysql", "postgresql", "postgres", "sql server"),
    "mongodb": ("mongo", "mongo db"),
    "express": ("express.js", "expressjs"),
    "vue": ("vue.js", "vuejs", "vue 3"),
    "angular": ("angularjs", "angular 2", "angular.js"),
    "docker": ("docker container", "dockerfile"),
    "kubernetes": ("k8s", "kube"),
    "aws": ("amazon web services", "amazon aws"),
    "azure": ("microsoft azure",),
    "gcp": ("google cloud", "google cloud platform"),
})

MAX_PROFICIENCY = 5
PROFICIENCY_BONUS = 20


class SkillNormalizer:
    """
    Canonicalizes skill names using a read-only synonym table.

    The table maps a canonical key to its known variant spellings. It is
    copied on construction, so later changes to the caller's dict have no
    effect.
    """

    def __init__(
        self,
        synonyms: Optional[Mapping[str, Sequence[str]]] = None,
        fuzzy: bool = True,
    ):
        """
        Args:
            synonyms: canonical -> variants table (default: DEFAULT_SYNONYMS)
            fuzzy: also treat substring containment as a match
        """
        table = DEFAULT_SYNONYMS if synonyms is None else synonyms
        self.synonyms: Mapping[str, tuple] = MappingProxyType({
            normalize_text(key): tuple(normalize_text(v) for v in variants)
            for key, variants in table.items()
        })
        self.fuzzy = fuzzy

        # First canonical key wins when a variant is listed twice (e.g. dotnet)
        variant_index: Dict[str, str] = {}
        for key, variants in self.synonyms.items():
            variant_index.setdefault(key, key)
            for variant in variants:
                variant_index.setdefault(variant, key)
        self._variant_index = MappingProxyType(variant_index)

    def canonicalize(self, skill_name: str) -> str:
        cleaned = normalize_text(str(skill_name))
        return self._variant_index.get(cleaned, cleaned)

    def skills_match(self, a: str, b: str) -> bool:
        """True when both names denote the same skill."""
        raw_a = normalize_text(str(a))
        raw_b = normalize_text(str(b))
        ca = self._variant_index.get(raw_a, raw_a)
        cb = self._variant_index.get(raw_b, raw_b)
        if ca == cb:
            return True
        # Variants listed under more than one key (dotnet) only canonicalize to one
        if raw_b in self.synonyms.get(ca, ()) or raw_a in self.synonyms.get(cb, ()):
            return True
        if self.fuzzy and ca and cb:
            return ca in cb or cb in ca
        return False


@dataclass
class SkillMatch:
    score: float
    matched: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)


def _proficiency(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return 1.0
    return float(value)


class SkillMatcher:
    """Proficiency-weighted skill compatibility score (0-100)."""

    def __init__(self, normalizer: Optional[SkillNormalizer] = None):
        self.normalizer = normalizer or SkillNormalizer()

    def match(
        self,
        required: Optional[Mapping[str, Any]],
        candidate: Optional[Mapping[str, Any]],
    ) -> SkillMatch:
        required_names = list((required or {}).keys())
        if not required_names:
            return SkillMatch(score=0.0)
        if not candidate:
            return SkillMatch(score=0.0, missing=required_names)

        candidate_names = list(candidate.keys())
        matched: List[str] = []
        missing: List[str] = []
        weight_total = 0.0

        for skill in required_names:
            found = next(
                (name for name in candidate_names if self.normalizer.skills_match(skill, name)),
                None,
            )
            if found is None:
                missing.append(skill)
                continue
            matched.append(skill)
            weight_total += _proficiency(candidate[found]) / MAX_PROFICIENCY

        base_score = len(matched) / len(required_names) * 100
        bonus = (weight_total / len(matched)) * PROFICIENCY_BONUS if matched else 0.0
        score = max(0.0, min(100.0, base_score + bonus))
        return SkillMatch(score=round(score, 2), matched=matched, missing=missing)


def parse_skill_list(skills: Union[str, Iterable[str], None]) -> List[str]:
    """Split a comma-separated skill query (or a list) into cleaned names, dropping blanks."""
    if skills is None:
        return []
    parts = skills.split(",") if isinstance(skills, str) else skills
    cleaned = (normalize_text(str(p)) for p in parts)
    return [name for name in cleaned if name]
