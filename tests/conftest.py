"""
Pytest configuration and shared fixtures.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest


@pytest.fixture
def kathmandu_posting() -> Dict[str, Any]:
    """On-site posting in Kathmandu with coordinates and a 2-year requirement."""
    return {
        "id": "job-1",
        "requiredSkills": {"react": True, "node.js": True},
        "province": "Bagmati",
        "district": "Kathmandu",
        "city": "Kathmandu",
        "latitude": 27.7172,
        "longitude": 85.3240,
        "isRemote": False,
        "experienceYears": 2,
    }


@pytest.fixture
def remote_posting(kathmandu_posting) -> Dict[str, Any]:
    posting = dict(kathmandu_posting)
    posting["id"] = "job-remote"
    posting["isRemote"] = True
    return posting


@pytest.fixture
def candidate_pool() -> List[Dict[str, Any]]:
    """
    Four candidates with known scores against kathmandu_posting:
    u1 = 100, u4 = 69.8, u2 = 47.2, u3 = 0.
    """
    return [
        {
            "id": "u2",
            "skills": {"react.js": 3},
            "province": "Bagmati",
            "district": "Lalitpur",
            "city": "Lalitpur",
            "experience": [{"duration": 1}],
        },
        {
            "id": "u3",
            "skills": {},
            "province": "Gandaki",
            "district": "Kaski",
            "city": "Pokhara",
            "experience": [],
        },
        {
            "userId": "u1",
            "technicalSkills": {"reactjs": 5, "nodejs": 4},
            "province": "Bagmati",
            "district": "Kathmandu",
            "city": "Kathmandu",
            "latitude": 27.7172,
            "longitude": 85.3240,
            "experience": [{"years": 3}],
        },
        {
            "id": "u4",
            "skills": {"node": 2},
            "location": {"province": "bagmati", "district": "KATHMANDU", "city": "Kirtipur"},
            "experience": [{"years": 1}, {"duration": 1.5}],
        },
    ]


@pytest.fixture
def posting_file(tmp_path, kathmandu_posting) -> Path:
    path = tmp_path / "posting.json"
    path.write_text(json.dumps(kathmandu_posting))
    return path


@pytest.fixture
def candidates_file(tmp_path, candidate_pool) -> Path:
    path = tmp_path / "candidates.json"
    path.write_text(json.dumps(candidate_pool, indent=2))
    return path
