"""
Tests for the match engine and ranking.
"""

import pytest
from talentmatch import ranking
from talentmatch.config import EngineConfig
from talentmatch.location import parse_area
from talentmatch.models import Candidate, MatchResult, Posting
from talentmatch.ranking import MatchEngine, MatchRanker, match_candidates_to_posting
from talentmatch.scoring import Weights


def result(candidate_id: str, score: float) -> MatchResult:
    return MatchResult(candidate_id, score, score, score, 0.0)


class TestMatchRanker:
    """Test ordering of match results."""

    def test_descending_by_score(self):
        ranked = MatchRanker().rank([result("a", 10), result("b", 90), result("c", 50)])
        assert [r.match_score for r in ranked] == [90, 50, 10]

    def test_ties_broken_by_candidate_id(self):
        ranked = MatchRanker().rank([result("c", 50), result("a", 50), result("b", 50)])
        assert [r.candidate_id for r in ranked] == ["a", "b", "c"]

    def test_does_not_mutate_input(self):
        results = [result("a", 10), result("b", 90)]
        MatchRanker().rank(results)
        assert [r.candidate_id for r in results] == ["a", "b"]

    def test_idempotent(self):
        results = [result("x", 33.3), result("y", 33.3), result("z", 99.9), result("w", 0)]
        once = MatchRanker().rank(results)
        twice = MatchRanker().rank(once)
        assert [r.candidate_id for r in once] == [r.candidate_id for r in twice]

    def test_empty(self):
        assert MatchRanker().rank([]) == []


class TestMatchEngine:
    """End-to-end scoring of the shared candidate pool."""

    def test_ranked_pool(self, kathmandu_posting, candidate_pool):
        ranked = MatchEngine().match_candidates(kathmandu_posting, candidate_pool)

        assert [r.candidate_id for r in ranked] == ["u1", "u4", "u2", "u3"]
        assert [r.match_score for r in ranked] == pytest.approx([100, 69.8, 47.2, 0])

    def test_explanations(self, kathmandu_posting, candidate_pool):
        by_id = {
            r.candidate_id: r
            for r in MatchEngine().match_candidates(kathmandu_posting, candidate_pool)
        }

        u1 = by_id["u1"]
        assert u1.distance_km == 0
        assert u1.details.distance_km == 0
        assert u1.details.matched_skills == ["react", "node.js"]
        assert u1.details.experience_match is True

        u2 = by_id["u2"]
        assert u2.skill_score == pytest.approx(62)
        assert u2.location_score == 50
        assert u2.distance_km is None
        assert u2.details.missing_skills == ["node.js"]
        assert u2.details.location_match is True
        assert u2.details.experience_match is False
        assert u2.experience_score == 0

        u3 = by_id["u3"]
        assert u3.skill_score == 0
        assert u3.details.missing_skills == ["react", "node.js"]
        assert u3.details.location_match is False

        u4 = by_id["u4"]
        assert u4.skill_score == pytest.approx(58)
        assert u4.location_score == 75
        assert u4.experience_score == 100

    def test_scores_in_range(self, kathmandu_posting, candidate_pool):
        for r in MatchEngine().match_candidates(kathmandu_posting, candidate_pool):
            for score in (r.match_score, r.skill_score, r.location_score, r.experience_score):
                assert 0 <= score <= 100

    def test_remote_posting_location_always_full(self, remote_posting, candidate_pool):
        for r in MatchEngine().match_candidates(remote_posting, candidate_pool):
            assert r.location_score == 100
            assert r.details.location_match is True
            assert r.distance_km is None

    def test_accepts_dataclasses(self, kathmandu_posting, candidate_pool):
        posting = Posting.from_dict(kathmandu_posting)
        candidates = [Candidate.from_dict(c) for c in candidate_pool]
        ranked = MatchEngine().match_candidates(posting, candidates)
        assert ranked[0].candidate_id == "u1"

    def test_non_finite_coordinates_fall_back_to_names(self, kathmandu_posting):
        candidate = {
            "id": "u-nan",
            "skills": {"react": 5},
            "province": "Bagmati",
            "district": "Kathmandu",
            "city": "Kathmandu",
            "latitude": float("nan"),
            "longitude": 85.3240,
        }
        result = MatchEngine().score_candidate(kathmandu_posting, candidate)
        assert result.location_score == 100
        assert result.distance_km is None

    def test_empty_pool(self, kathmandu_posting):
        assert MatchEngine().match_candidates(kathmandu_posting, []) == []

    def test_custom_weights(self, kathmandu_posting, candidate_pool):
        config = EngineConfig(weights=Weights(skill=0.0, location=1.0, experience=0.0))
        ranked = MatchEngine(config).match_candidates(kathmandu_posting, candidate_pool)
        assert [r.match_score for r in ranked] == pytest.approx([100, 75, 50, 0])

    def test_strict_skills(self):
        posting = {"requiredSkills": {"java": True}}
        candidates = [{"id": "js-dev", "skills": {"javascript": 5}}]
        fuzzy = MatchEngine().match_candidates(posting, candidates)[0]
        strict = MatchEngine(EngineConfig(fuzzy_skills=False)).match_candidates(posting, candidates)[0]
        assert fuzzy.skill_score == 100
        assert strict.skill_score == 0

    def test_parallel_matches_serial(self, kathmandu_posting, candidate_pool):
        pool = [dict(c, id=f"{c.get('id', c.get('userId'))}-{i}") for i in range(25) for c in candidate_pool]
        for c in pool:
            c.pop("userId", None)
        serial = MatchEngine().match_candidates(kathmandu_posting, pool)
        parallel = MatchEngine(EngineConfig(max_workers=4, parallel_threshold=10)).match_candidates(
            kathmandu_posting, pool
        )
        assert [r.to_dict() for r in parallel] == [r.to_dict() for r in serial]

    def test_ranking_twice_is_stable(self, kathmandu_posting, candidate_pool):
        engine = MatchEngine()
        first = engine.match_candidates(kathmandu_posting, candidate_pool)
        second = engine.match_candidates(kathmandu_posting, candidate_pool)
        assert [r.candidate_id for r in first] == [r.candidate_id for r in second]

    def test_records_metrics(self, kathmandu_posting, candidate_pool):
        before = ranking.logger.get_metrics()
        MatchEngine().match_candidates(kathmandu_posting, candidate_pool)
        after = ranking.logger.get_metrics()

        assert after["rankings_run"] == before["rankings_run"] + 1
        assert after["candidates_scored"] == before["candidates_scored"] + 4
        assert after["geo_comparisons"] == before["geo_comparisons"] + 1
        assert after["hierarchy_fallbacks"] == before["hierarchy_fallbacks"] + 3


class TestSelection:
    """Test limit/min-score post-processing and the reverse direction."""

    def test_top_matches_limit(self, kathmandu_posting, candidate_pool):
        top = MatchEngine().top_matches(kathmandu_posting, candidate_pool, limit=2)
        assert [r.candidate_id for r in top] == ["u1", "u4"]

    def test_top_matches_min_score(self, kathmandu_posting, candidate_pool):
        top = MatchEngine().top_matches(kathmandu_posting, candidate_pool, min_score=50)
        assert [r.candidate_id for r in top] == ["u1", "u4"]

    def test_zero_limit(self, kathmandu_posting, candidate_pool):
        assert MatchEngine().top_matches(kathmandu_posting, candidate_pool, limit=0) == []

    def test_recommend_postings(self, kathmandu_posting, remote_posting):
        candidate = {
            "id": "u5",
            "skills": {"react": 4},
            "province": "Gandaki",
            "district": "Kaski",
            "experience": [{"years": 5}],
        }
        results = MatchEngine().recommend_postings(candidate, [kathmandu_posting, remote_posting])

        assert [r.posting_id for r in results] == ["job-remote", "job-1"]
        assert all(r.candidate_id == "u5" for r in results)
        # skill 66 (50 + 0.8 * 20); the on-site posting is in another province
        assert [r.match_score for r in results] == pytest.approx([79.6, 59.6])

    def test_recommend_with_min_score(self, kathmandu_posting, remote_posting):
        candidate = {"id": "u5", "skills": {"react": 4}, "province": "Gandaki", "experience": [{"years": 5}]}
        results = MatchEngine().recommend_postings(
            candidate, [kathmandu_posting, remote_posting], min_score=60
        )
        assert [r.posting_id for r in results] == ["job-remote"]



class TestSkillSearch:
    """Test free-text skill search over a candidate pool."""

    def test_percentage_and_order(self, candidate_pool):
        hits = MatchEngine().search_by_skills("React, Node.js", candidate_pool)

        assert [h.candidate_id for h in hits] == ["u1", "u2", "u4"]
        assert [h.match_percentage for h in hits] == [100.0, 50.0, 50.0]
        assert hits[1].matched_skills == ["react"]
        assert hits[2].matched_skills == ["node.js"]

    def test_candidates_without_matches_dropped(self, candidate_pool):
        hits = MatchEngine().search_by_skills(["kubernetes"], candidate_pool)
        assert hits == []

    def test_substring_match(self):
        pool = [{"id": "js-dev", "skills": {"javascript": 4}}]
        assert MatchEngine().search_by_skills("java", pool)[0].match_percentage == 100
        assert MatchEngine(EngineConfig(fuzzy_skills=False)).search_by_skills("java", pool) == []

    def test_area_filter(self, candidate_pool):
        hits = MatchEngine().search_by_skills(
            "react,node.js", candidate_pool, area=parse_area("Bagmati,Kathmandu")
        )
        assert [h.candidate_id for h in hits] == ["u1", "u4"]

    def test_limit(self, candidate_pool):
        hits = MatchEngine().search_by_skills("react,node.js", candidate_pool, limit=1)
        assert [h.candidate_id for h in hits] == ["u1"]

    def test_to_dict(self, candidate_pool):
        data = MatchEngine().search_by_skills("react", candidate_pool)[0].to_dict()
        assert data == {
            "userId": "u1",
            "matchedSkills": ["react"],
            "matchCount": 1,
            "matchPercentage": 100.0,
        }

    @pytest.mark.parametrize("skills", ["", " , ", []])
    def test_skills_required(self, skills, candidate_pool):
        with pytest.raises(ValueError):
            MatchEngine().search_by_skills(skills, candidate_pool)

class TestConvenienceFunction:

    def test_match_candidates_to_posting(self, kathmandu_posting, candidate_pool):
        ranked = match_candidates_to_posting(kathmandu_posting, candidate_pool)
        assert ranked[0].to_dict()["userId"] == "u1"
        assert ranked[-1].to_dict()["matchScore"] == 0
