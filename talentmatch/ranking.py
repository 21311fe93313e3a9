"""
Match orchestration and ranking.

Responsibilities:
- Run the skill, location and experience matchers for each candidate.
- Combine the three scores and build an explainable MatchResult.
- Produce a total order over the result set.

Non-Responsibilities:
- No persistence, no pagination, no schema validation.

Invariant:
Scoring a candidate never depends on any other candidate, so the per-candidate
phase may run in any order; only the final sort imposes one.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .config import EngineConfig
from .experience import ExperienceMatcher
from .location import LocationMatcher, in_area
from .logger import get_logger
from .models import Candidate, LocationDescriptor, MatchDetails, MatchResult, Posting, SkillSearchHit
from .scoring import ScoreAggregator
from .skills import SkillMatcher, SkillNormalizer, parse_skill_list

logger = get_logger()

PostingLike = Union[Posting, Dict[str, Any]]
CandidateLike = Union[Candidate, Dict[str, Any]]


def _as_posting(posting: PostingLike) -> Posting:
    return posting if isinstance(posting, Posting) else Posting.from_dict(posting)


def _as_candidate(candidate: CandidateLike) -> Candidate:
    return candidate if isinstance(candidate, Candidate) else Candidate.from_dict(candidate)


class MatchRanker:
    """Sorts results by aggregate score, highest first; ties by candidate id."""

    def rank(self, results: Iterable[MatchResult]) -> List[MatchResult]:
        return sorted(
            results,
            key=lambda r: (-r.match_score, r.candidate_id, r.posting_id or ""),
        )


class MatchEngine:
    """
    Scores candidates against postings.

    The engine holds only immutable configuration (weights, synonym table),
    so one instance can be shared between threads.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        normalizer: Optional[SkillNormalizer] = None,
    ):
        self.config = config or EngineConfig()
        self.skill_matcher = SkillMatcher(
            normalizer or SkillNormalizer(fuzzy=self.config.fuzzy_skills)
        )
        self.location_matcher = LocationMatcher(self.config.max_distance_km)
        self.experience_matcher = ExperienceMatcher()
        self.aggregator = ScoreAggregator(self.config.weights)
        self.ranker = MatchRanker()

    def score_candidate(self, posting: PostingLike, candidate: CandidateLike) -> MatchResult:
        posting = _as_posting(posting)
        candidate = _as_candidate(candidate)

        skills = self.skill_matcher.match(posting.required_skills, candidate.skills)
        location = self.location_matcher.match(
            posting.location, candidate.location, posting.is_remote
        )
        experience_ok = self.experience_matcher.match(
            posting.experience_years_required, candidate.experience
        )
        match_score = self.aggregator.aggregate(skills.score, location.score, experience_ok)

        logger.record_location_method(location.method)
        logger.debug(
            "Scored candidate",
            candidate_id=candidate.id,
            posting_id=posting.id,
            match_score=match_score,
            skill=skills.score,
            location=location.score,
            location_method=location.method,
            experience=experience_ok,
        )

        return MatchResult(
            candidate_id=candidate.id,
            posting_id=posting.id,
            match_score=match_score,
            skill_score=skills.score,
            location_score=location.score,
            experience_score=100.0 if experience_ok else 0.0,
            distance_km=location.distance_km,
            details=MatchDetails(
                matched_skills=skills.matched,
                missing_skills=skills.missing,
                location_match=location.matches,
                experience_match=experience_ok,
                distance_km=location.distance_km,
            ),
        )

    def _score_all(self, posting: Posting, candidates: Sequence[Candidate]) -> List[MatchResult]:
        workers = self.config.max_workers
        if workers > 1 and len(candidates) >= self.config.parallel_threshold:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(lambda c: self.score_candidate(posting, c), candidates))
        return [self.score_candidate(posting, c) for c in candidates]

    def match_candidates(
        self,
        posting: PostingLike,
        candidates: Iterable[CandidateLike],
    ) -> List[MatchResult]:
        """Score every candidate against one posting and rank the results."""
        posting = _as_posting(posting)
        pool = [_as_candidate(c) for c in candidates]

        ranked = self.ranker.rank(self._score_all(posting, pool))
        logger.record_ranking(len(pool))
        logger.info(
            "Ranked candidates",
            posting_id=posting.id,
            pool_size=len(pool),
            top_score=ranked[0].match_score if ranked else None,
        )
        return ranked

    def top_matches(
        self,
        posting: PostingLike,
        candidates: Iterable[CandidateLike],
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> List[MatchResult]:
        """Ranked matches at or above `min_score`, truncated to `limit`."""
        return _select(self.match_candidates(posting, candidates), limit, min_score)

    def recommend_postings(
        self,
        candidate: CandidateLike,
        postings: Iterable[PostingLike],
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> List[MatchResult]:
        """
        Score one candidate against many postings.

        Each result carries the posting id; ranking uses the same order as
        match_candidates.
        """
        candidate = _as_candidate(candidate)
        pool = [_as_posting(p) for p in postings]
        results = [self.score_candidate(p, candidate) for p in pool]
        ranked = self.ranker.rank(results)
        logger.record_ranking(len(pool))
        logger.info(
            "Ranked postings for candidate",
            candidate_id=candidate.id,
            pool_size=len(pool),
        )
        return _select(ranked, limit, min_score)

    def search_by_skills(
        self,
        skills: Union[str, Iterable[str]],
        candidates: Iterable[CandidateLike],
        area: Optional[LocationDescriptor] = None,
        limit: Optional[int] = None,
    ) -> List[SkillSearchHit]:
        """
        Find candidates holding any of the requested skills.

        `skills` is a comma-separated string or a list of names. A requested
        skill counts once per candidate when it matches any of the
        candidate's skills. Candidates matching nothing are dropped; the rest
        are ordered by match percentage, highest first.

        Raises:
            ValueError: If no skill names are given
        """
        requested = parse_skill_list(skills)
        if not requested:
            raise ValueError("At least one skill is required")

        normalizer = self.skill_matcher.normalizer
        hits: List[SkillSearchHit] = []
        pool_size = 0
        for candidate in candidates:
            candidate = _as_candidate(candidate)
            pool_size += 1
            if area is not None and not in_area(area, candidate.location):
                continue
            names = list(candidate.skills.keys())
            matched = [
                skill for skill in requested
                if any(normalizer.skills_match(skill, name) for name in names)
            ]
            if not matched:
                continue
            hits.append(SkillSearchHit(
                candidate_id=candidate.id,
                matched_skills=matched,
                match_percentage=round(len(matched) / len(requested) * 100, 2),
            ))

        hits.sort(key=lambda h: (-h.match_percentage, h.candidate_id))
        logger.info(
            "Searched candidates by skill",
            skills=requested,
            pool_size=pool_size,
            hits=len(hits),
        )
        if limit is not None:
            hits = hits[:max(0, limit)]
        return hits


def _select(
    ranked: List[MatchResult],
    limit: Optional[int],
    min_score: Optional[float],
) -> List[MatchResult]:
    if min_score is not None:
        ranked = [r for r in ranked if r.match_score >= min_score]
    if limit is not None:
        ranked = ranked[:max(0, limit)]
    return ranked


def match_candidates_to_posting(
    posting: PostingLike,
    candidates: Iterable[CandidateLike],
    config: Optional[EngineConfig] = None,
) -> List[MatchResult]:
    """Convenience wrapper: build an engine and rank `candidates` for `posting`."""
    return MatchEngine(config).match_candidates(posting, candidates)
