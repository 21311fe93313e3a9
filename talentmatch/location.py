"""
Location compatibility scoring.

Uses great-circle distance when both sides carry coordinates and falls back
to comparing province, district and city names otherwise.

Invariant:
Remote postings always score 100, whatever the candidate's location.
"""

from dataclasses import dataclass
from typing import Optional

from .geo import distance_km
from .models import LocationDescriptor
from .normalize import normalize_place

FULL_SCORE_RADIUS_KM = 10.0
SCORE_CAP_KM = 50.0
DEFAULT_MAX_DISTANCE_KM = 50.0

SAME_PROVINCE_SCORE = 50.0
SAME_DISTRICT_SCORE = 75.0


@dataclass
class LocationMatch:
    matches: bool
    score: float
    distance_km: Optional[float] = None
    method: str = "hierarchy"  # remote | geo | hierarchy


def distance_score(distance: float, cap_km: float = SCORE_CAP_KM) -> float:
    """100 inside 10 km, linear 100 -> 50 up to 50 km, 0 beyond `cap_km`."""
    if distance > cap_km:
        return 0.0
    if distance <= FULL_SCORE_RADIUS_KM:
        return 100.0
    span = SCORE_CAP_KM - FULL_SCORE_RADIUS_KM
    return 100.0 - ((distance - FULL_SCORE_RADIUS_KM) / span) * 50.0


def _differs(a: Optional[str], b: Optional[str]) -> bool:
    a, b = normalize_place(a), normalize_place(b)
    return a is not None and b is not None and a != b


class LocationMatcher:

    def __init__(self, max_distance_km: float = DEFAULT_MAX_DISTANCE_KM):
        self.max_distance_km = max_distance_km

    def match(
        self,
        posting_location: LocationDescriptor,
        candidate_location: LocationDescriptor,
        is_remote: bool = False,
        max_distance_km: Optional[float] = None,
    ) -> LocationMatch:
        if is_remote:
            return LocationMatch(matches=True, score=100.0, method="remote")

        limit = self.max_distance_km if max_distance_km is None else max_distance_km

        if posting_location.point is not None and candidate_location.point is not None:
            dist = distance_km(posting_location.point, candidate_location.point)
            score = distance_score(dist, cap_km=min(SCORE_CAP_KM, limit))
            return LocationMatch(
                matches=dist <= limit,
                score=round(score, 2),
                distance_km=round(dist, 1),
                method="geo",
            )

        return self._match_hierarchy(posting_location, candidate_location)

    def _match_hierarchy(
        self,
        posting_location: LocationDescriptor,
        candidate_location: LocationDescriptor,
    ) -> LocationMatch:
        # A level is compared only when both sides carry it
        if _differs(posting_location.province, candidate_location.province):
            return LocationMatch(matches=False, score=0.0)
        if _differs(posting_location.district, candidate_location.district):
            return LocationMatch(matches=True, score=SAME_PROVINCE_SCORE)
        if _differs(posting_location.city, candidate_location.city):
            return LocationMatch(matches=True, score=SAME_DISTRICT_SCORE)
        return LocationMatch(matches=True, score=100.0)


def parse_area(text: Optional[str]) -> LocationDescriptor:
    """Parse "province,district,city" (trailing parts optional) into a descriptor."""
    parts = [p.strip() or None for p in (text or "").split(",")][:3]
    parts += [None] * (3 - len(parts))
    return LocationDescriptor(province=parts[0], district=parts[1], city=parts[2])


def in_area(area: LocationDescriptor, location: LocationDescriptor) -> bool:
    """True when every level set on `area` equals the same level of `location`."""
    for level in ("province", "district", "city"):
        wanted = normalize_place(getattr(area, level))
        if wanted is not None and normalize_place(getattr(location, level)) != wanted:
            return False
    return True
