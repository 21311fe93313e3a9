import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from .models import MatchResult, SkillSearchHit

Result = Union[MatchResult, SkillSearchHit]


def load_json(path: Path) -> Any:
    """Read a JSON document. Raises FileNotFoundError / json.JSONDecodeError."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_records(path: Path) -> List[Dict[str, Any]]:
    """Load a list of records from a JSON array, a {"data": [...]} envelope, or JSON lines."""
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if path.suffix == ".jsonl":
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    data = json.loads(text)
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return data["data"]
    if isinstance(data, list):
        return data
    raise ValueError(f"Expected a JSON array or a {{\"data\": [...]}} object in {path}")


def results_payload(results: Iterable[Result]) -> Dict[str, Any]:
    return {"data": [r.to_dict() for r in results]}


def save_results(path: Path, results: Iterable[Result]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(results_payload(results), f, indent=2, ensure_ascii=False)
