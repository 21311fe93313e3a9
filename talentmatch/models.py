"""
Data model for the match engine.

Every object here is built fresh per call from caller-supplied dicts. The
`from_dict` constructors are the boundary normalizers: they accept the
historical field names callers send (camelCase or snake_case, flat or nested
location fields, `years` or `duration` on experience entries) and map them
onto one internal shape so the scoring code never branches on field presence.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .normalize import to_float


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    @classmethod
    def from_values(cls, latitude: Any, longitude: Any) -> Optional["GeoPoint"]:
        """Return a point only when both coordinates are present."""
        lat = to_float(latitude)
        lon = to_float(longitude)
        if lat is None or lon is None:
            return None
        return cls(lat, lon)


@dataclass
class LocationDescriptor:
    province: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    ward: Optional[str] = None
    point: Optional[GeoPoint] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LocationDescriptor":
        data = data or {}
        return cls(
            province=data.get("province"),
            district=data.get("district"),
            city=data.get("city"),
            street=data.get("street"),
            ward=data.get("ward"),
            point=GeoPoint.from_values(data.get("latitude"), data.get("longitude")),
        )


@dataclass(frozen=True)
class ExperienceRecord:
    years: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "ExperienceRecord":
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return cls(float(data))
        if not isinstance(data, dict):
            return cls(0.0)
        # A zero or missing `years` falls through to `duration`
        years = to_float(data.get("years")) or to_float(data.get("duration")) or 0.0
        return cls(years)


def _location_source(data: Dict[str, Any]) -> Dict[str, Any]:
    nested = data.get("location")
    if isinstance(nested, dict):
        return nested
    return data


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _experience_list(raw: Any) -> List[ExperienceRecord]:
    if not isinstance(raw, list):
        return []
    return [ExperienceRecord.from_dict(entry) for entry in raw]


@dataclass
class Posting:
    required_skills: Dict[str, Any] = field(default_factory=dict)
    location: LocationDescriptor = field(default_factory=LocationDescriptor)
    is_remote: bool = False
    experience_years_required: Optional[float] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Posting":
        skills = _first(data, "requiredSkills", "required_skills", default={})
        if isinstance(skills, list):
            skills = {name: True for name in skills}
        posting_id = _first(data, "id", "jobId", "job_id")
        return cls(
            required_skills=dict(skills or {}),
            location=LocationDescriptor.from_dict(_location_source(data)),
            is_remote=bool(_first(data, "isRemote", "is_remote", default=False)),
            experience_years_required=to_float(
                _first(
                    data,
                    "experienceYearsRequired",
                    "experienceYears",
                    "experience_years_required",
                )
            ),
            id=str(posting_id) if posting_id is not None else None,
        )


@dataclass
class Candidate:
    id: str
    skills: Dict[str, Any] = field(default_factory=dict)
    location: LocationDescriptor = field(default_factory=LocationDescriptor)
    experience: List[ExperienceRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Candidate":
        return cls(
            id=str(_first(data, "id", "userId", "user_id", default="")),
            skills=dict(_first(data, "skills", "technicalSkills", "technical_skills", default={}) or {}),
            location=LocationDescriptor.from_dict(_location_source(data)),
            experience=_experience_list(
                _first(data, "experienceRecords", "experience_records", "experience")
            ),
        )


@dataclass
class MatchDetails:
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)
    location_match: bool = False
    experience_match: bool = False
    distance_km: Optional[float] = None


@dataclass
class MatchResult:
    candidate_id: str
    match_score: float
    skill_score: float
    location_score: float
    experience_score: float
    distance_km: Optional[float] = None
    details: MatchDetails = field(default_factory=MatchDetails)
    posting_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Render the JSON shape handed back to API callers."""
        out: Dict[str, Any] = {
            "userId": self.candidate_id,
            "matchScore": self.match_score,
            "skillMatch": self.skill_score,
            "locationMatch": self.location_score,
            "experienceMatch": self.experience_score,
            "distance": self.distance_km,
            "details": {
                "matchedSkills": list(self.details.matched_skills),
                "missingSkills": list(self.details.missing_skills),
                "locationMatch": self.details.location_match,
                "experienceMatch": self.details.experience_match,
                "distance": self.details.distance_km,
            },
        }
        if self.posting_id is not None:
            out["jobId"] = self.posting_id
        return out


@dataclass
class SkillSearchHit:
    """A candidate returned by a free-text skill search."""
    candidate_id: str
    matched_skills: List[str] = field(default_factory=list)
    match_percentage: float = 0.0

    @property
    def match_count(self) -> int:
        return len(self.matched_skills)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.candidate_id,
            "matchedSkills": list(self.matched_skills),
            "matchCount": self.match_count,
            "matchPercentage": self.match_percentage,
        }
