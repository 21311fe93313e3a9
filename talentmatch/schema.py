import math
from typing import Any, Dict, List, Tuple

from .geo import is_valid_coordinates

LOCATION_STR_FIELDS = ["province", "district", "city", "street", "ward"]
MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5
EXPERIENCE_YEARS_FIELDS = ["experienceYearsRequired", "experienceYears", "experience_years_required"]


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _location(data: Dict[str, Any]) -> Dict[str, Any]:
    nested = data.get("location")
    return nested if isinstance(nested, dict) else data


def _check_location(data: Dict[str, Any], errors: List[str]) -> None:
    loc = _location(data)
    for f in LOCATION_STR_FIELDS:
        if loc.get(f) is not None and not isinstance(loc[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    lat, lon = loc.get("latitude"), loc.get("longitude")
    for name, value in (("latitude", lat), ("longitude", lon)):
        if value is not None and not _is_number(value):
            errors.append(f"Field '{name}' must be a number if provided")
    if (lat is None) != (lon is None):
        errors.append("Fields 'latitude' and 'longitude' must be provided together")


def _check_skill_map(data: Any, field: str, errors: List[str], numeric: bool) -> None:
    if data is None:
        return
    if not isinstance(data, (dict, list)) or (isinstance(data, list) and numeric):
        errors.append(f"Field '{field}' must be an object mapping skill name to value")
        return
    names = data if isinstance(data, list) else list(data.keys())
    for name in names:
        if not isinstance(name, str) or not name.strip():
            errors.append(f"Field '{field}' contains an empty skill name")
    if numeric:
        for name, value in data.items():
            if value is not None and not _is_number(value):
                errors.append(f"Skill '{name}' proficiency must be a number")


def validate_posting(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Only type conformance is checked; the engine handles absent values.
    """
    if not isinstance(data, dict):
        return ["Posting must be a JSON object"]
    errors: List[str] = []

    skills = data.get("requiredSkills", data.get("required_skills"))
    _check_skill_map(skills, "requiredSkills", errors, numeric=False)

    remote = data.get("isRemote", data.get("is_remote"))
    if remote is not None and not isinstance(remote, bool):
        errors.append("Field 'isRemote' must be a boolean if provided")

    for f in EXPERIENCE_YEARS_FIELDS:
        if data.get(f) is not None and not _is_number(data[f]):
            errors.append(f"Field '{f}' must be a number if provided")

    _check_location(data, errors)
    return errors


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    if not isinstance(data, dict):
        return ["Candidate must be a JSON object"]
    errors: List[str] = []

    cid = data.get("id", data.get("userId"))
    if cid is None or (isinstance(cid, str) and not cid.strip()):
        errors.append("Missing required field: id")
    elif not isinstance(cid, (str, int)):
        errors.append("Field 'id' must be a string or integer")

    skills = data.get("skills", data.get("technicalSkills"))
    _check_skill_map(skills, "skills", errors, numeric=True)

    experience = data.get("experienceRecords", data.get("experience"))
    if experience is not None:
        if not isinstance(experience, list):
            errors.append("Field 'experience' must be a list if provided")
        else:
            for i, entry in enumerate(experience):
                if not isinstance(entry, dict):
                    errors.append(f"Experience entry {i} must be an object")
                    continue
                for f in ("years", "duration"):
                    if entry.get(f) is not None and not _is_number(entry[f]):
                        errors.append(f"Experience entry {i}: '{f}' must be a number")

    _check_location(data, errors)
    return errors


def _strict_range_errors(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    loc = _location(data)
    lat, lon = loc.get("latitude"), loc.get("longitude")
    if _is_number(lat) and _is_number(lon) and not is_valid_coordinates(lat, lon):
        errors.append("Coordinates out of range (latitude -90..90, longitude -180..180)")
    return errors


def validate_posting_strict(data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Strict validation: type checks plus coordinate ranges.
    Returns (is_valid, errors).
    """
    errors = validate_posting(data)
    if not errors:
        errors.extend(_strict_range_errors(data))
        for f in EXPERIENCE_YEARS_FIELDS:
            if _is_number(data.get(f)) and data[f] < 0:
                errors.append(f"Field '{f}' must not be negative")
    return (len(errors) == 0, errors)


def validate_candidate_strict(data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Strict validation: type checks, coordinate ranges, proficiency in 1..5.
    Returns (is_valid, errors).
    """
    errors = validate_candidate(data)
    if not errors:
        errors.extend(_strict_range_errors(data))
        skills = data.get("skills", data.get("technicalSkills")) or {}
        for name, level in skills.items():
            if _is_number(level) and not MIN_PROFICIENCY <= level <= MAX_PROFICIENCY:
                errors.append(
                    f"Skill '{name}' proficiency must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}"
                )
    return (len(errors) == 0, errors)
