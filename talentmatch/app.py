import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from .env import load_env

from . import __version__
from .config import ConfigError, load_config
from .geo import find_nearby, format_distance, is_valid_coordinates
from .location import parse_area
from .logger import get_logger
from .models import Candidate, GeoPoint
from .ranking import MatchEngine
from .schema import (
    validate_candidate,
    validate_candidate_strict,
    validate_posting,
    validate_posting_strict,
)
from .storage import Result, load_json, load_records, results_payload, save_results

logger = get_logger()


def _require_file(path_str: str) -> Path:
    path = Path(path_str)
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    return path


def _read_records(path_str: str) -> List[Dict[str, Any]]:
    path = _require_file(path_str)
    try:
        return load_records(path)
    except (json.JSONDecodeError, ValueError) as e:
        raise SystemExit(f"Could not read {path}: {e}")


def _read_object(path_str: str) -> Dict[str, Any]:
    path = _require_file(path_str)
    try:
        data = load_json(path)
    except json.JSONDecodeError as e:
        raise SystemExit(f"Could not read {path}: {e}")
    if not isinstance(data, dict):
        raise SystemExit(f"Expected a JSON object in {path}")
    return data


def _build_engine(args: argparse.Namespace) -> MatchEngine:
    try:
        config = load_config(
            max_distance_km=getattr(args, "max_distance", None),
            max_workers=getattr(args, "workers", None),
            fuzzy_skills=False if getattr(args, "strict_skills", False) else None,
        )
    except ConfigError as e:
        raise SystemExit(f"Invalid configuration: {e}")
    logger.set_level(config.log_level)
    return MatchEngine(config)


def _keep_valid(records: List[Dict[str, Any]], validator, kind: str) -> List[Dict[str, Any]]:
    valid = []
    for i, record in enumerate(records):
        errors = validator(record)
        if errors:
            logger.record_invalid_input(f"{kind}_validation_error")
            logger.warning(f"Skipping invalid {kind}", index=i, errors=errors)
            continue
        valid.append(record)
    return valid


def _emit(results: List[Result], output: str) -> None:
    if output:
        save_results(Path(output), results)
        print(f"Wrote {len(results)} results to {output}")
        return
    json.dump(results_payload(results), sys.stdout, indent=2, ensure_ascii=False)
    print()


def cmd_rank(args: argparse.Namespace) -> None:
    posting = _read_object(args.posting)
    errors = validate_posting(posting)
    if errors:
        print("Invalid posting:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)

    candidates = _keep_valid(_read_records(args.candidates), validate_candidate, "candidate")
    engine = _build_engine(args)
    results = engine.top_matches(posting, candidates, limit=args.limit, min_score=args.min_score)
    _emit(results, args.output)


def cmd_recommend(args: argparse.Namespace) -> None:
    candidate = _read_object(args.candidate)
    errors = validate_candidate(candidate)
    if errors:
        print("Invalid candidate:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)

    postings = _keep_valid(_read_records(args.postings), validate_posting, "posting")
    engine = _build_engine(args)
    results = engine.recommend_postings(candidate, postings, limit=args.limit, min_score=args.min_score)
    _emit(results, args.output)


def cmd_search(args: argparse.Namespace) -> None:
    candidates = _keep_valid(_read_records(args.input), validate_candidate, "candidate")
    engine = _build_engine(args)
    area = parse_area(args.location) if args.location else None
    try:
        hits = engine.search_by_skills(args.skills, candidates, area=area, limit=args.limit)
    except ValueError as e:
        raise SystemExit(f"Invalid search: {e}")
    _emit(hits, args.output)


def cmd_validate(args: argparse.Namespace) -> None:
    data = _read_object(args.input)
    if args.kind == "posting":
        is_valid, errors = validate_posting_strict(data)
    else:
        is_valid, errors = validate_candidate_strict(data)
    if not is_valid:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def _candidate_point(record: Dict[str, Any]):
    return Candidate.from_dict(record).location.point


def cmd_nearby(args: argparse.Namespace) -> None:
    if not is_valid_coordinates(args.lat, args.lon):
        raise SystemExit("Coordinates out of range (latitude -90..90, longitude -180..180)")
    records = _read_records(args.input)
    center = GeoPoint(args.lat, args.lon)
    nearby = find_nearby(center, records, radius_km=args.radius, key=_candidate_point)
    if not nearby:
        print("No candidates within range.")
        return
    print(f"Found {len(nearby)} within {args.radius:g} km:\n")
    for record, dist in nearby:
        loc = Candidate.from_dict(record).location
        place = ", ".join(p for p in (loc.city, loc.district, loc.province) if p)
        print(f"ID: {record.get('id', record.get('userId'))}  {format_distance(dist, show_away=True)}")
        if place:
            print(f"  Location: {place}")


def _add_match_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--limit", type=int, help="Keep only the top N results")
    p.add_argument("--min-score", type=float, help="Drop results below this aggregate score")
    p.add_argument("--max-distance", type=float, help="Maximum distance in km for a location match (default 50)")
    p.add_argument("--strict-skills", action="store_true", help="Disable substring skill matching; synonyms only")
    p.add_argument("--workers", type=int, help="Worker threads for large pools (or set TALENTMATCH_MAX_WORKERS)")
    p.add_argument("--output", help="Write {\"data\": [...]} JSON here instead of stdout")


def main(argv=None):
    # Load .env if present (TALENTMATCH_WEIGHT_SKILL, TALENTMATCH_MAX_DISTANCE_KM, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="talentmatch", description="TalentMatch - rank candidates for a posting")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    rnk = subparsers.add_parser("rank", help="Rank candidates against a posting")
    rnk.add_argument("--posting", required=True, help="Path to posting JSON")
    rnk.add_argument("--candidates", required=True, help="Path to candidates JSON array (or .jsonl)")
    _add_match_options(rnk)
    rnk.set_defaults(func=cmd_rank)

    rec = subparsers.add_parser("recommend", help="Rank postings for a single candidate")
    rec.add_argument("--candidate", required=True, help="Path to candidate JSON")
    rec.add_argument("--postings", required=True, help="Path to postings JSON array (or .jsonl)")
    _add_match_options(rec)
    rec.set_defaults(func=cmd_recommend)

    srch = subparsers.add_parser("search", help="Find candidates holding any of the given skills")
    srch.add_argument("--skills", required=True, help="Comma-separated skill names, e.g. \"react,node.js\"")
    srch.add_argument("--input", required=True, help="Path to candidates JSON array (or .jsonl)")
    srch.add_argument("--location", help="Restrict to \"province[,district[,city]]\"")
    srch.add_argument("--limit", type=int, help="Keep only the top N results")
    srch.add_argument("--strict-skills", action="store_true", help="Disable substring skill matching; synonyms only")
    srch.add_argument("--output", help="Write {\"data\": [...]} JSON here instead of stdout")
    srch.set_defaults(func=cmd_search)

    val = subparsers.add_parser("validate", help="Validate a posting or candidate JSON")
    val.add_argument("--input", required=True, help="Path to JSON input")
    val.add_argument("--kind", choices=["posting", "candidate"], default="posting", help="Record type (default: posting)")
    val.set_defaults(func=cmd_validate)

    near = subparsers.add_parser("nearby", help="List candidates within a radius of a point")
    near.add_argument("--lat", type=float, required=True, help="Center latitude")
    near.add_argument("--lon", type=float, required=True, help="Center longitude")
    near.add_argument("--radius", type=float, default=50.0, help="Radius in km (default 50)")
    near.add_argument("--input", required=True, help="Path to candidates JSON array (or .jsonl)")
    near.set_defaults(func=cmd_nearby)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
