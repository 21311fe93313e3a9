"""
Weighted aggregation of the per-dimension scores.

Invariant:
Given identical inputs, the aggregate is always the same value. Weights are
applied as given; they are expected, not forced, to sum to 1.0.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Weights:
    skill: float = 0.6
    location: float = 0.2
    experience: float = 0.2

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Weights":
        """Build weights from a partial dict; missing keys keep their defaults."""
        data = data or {}
        defaults = cls()
        return cls(
            skill=float(data.get("skill", defaults.skill)),
            location=float(data.get("location", defaults.location)),
            experience=float(data.get("experience", defaults.experience)),
        )

    def total(self) -> float:
        return self.skill + self.location + self.experience


class ScoreAggregator:

    def __init__(self, weights: Optional[Weights] = None):
        self.weights = weights or Weights()

    def aggregate(
        self,
        skill_score: float,
        location_score: float,
        experience_matched: bool,
        weights: Optional[Weights] = None,
    ) -> float:
        w = weights or self.weights
        experience_score = 100.0 if experience_matched else 0.0
        total = (
            skill_score * w.skill
            + location_score * w.location
            + experience_score * w.experience
        )
        return round(total, 2)
