"""
TalentMatch: skill, location and experience matching for job postings.

Scores a pool of candidate profiles against a posting and returns a ranked
list with per-candidate explanations.
"""

__version__ = "0.1.0"

from .ranking import MatchEngine, MatchRanker, match_candidates_to_posting  # noqa: F401,E402
