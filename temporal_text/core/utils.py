"""
Utility functions and data classes for Temporal Text.

Contains shared data structures and file I/O helpers for recorded
recognition results.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Dict, Optional, Any, Iterable, Union


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class FrameBatch:
    """Candidate strings recognized in a single processed frame."""
    frame_index: int
    strings: List[str] = field(default_factory=list)


@dataclass
class Candidate:
    """A deduplicated text value with its sighting-based priority."""
    text: str
    priority: int = 1


@dataclass
class StableResult:
    """A string judged temporally stable."""
    text: str
    count: int
    frame_index: int


# =============================================================================
# Text Helpers
# =============================================================================

def clean_string(text: str) -> Optional[str]:
    """Strip non-ASCII characters and surrounding whitespace.

    Returns None when nothing is left.
    """
    if not text:
        return None
    cleaned = text.encode("ascii", errors="ignore").decode("ascii").strip()
    return cleaned or None


# =============================================================================
# File I/O Utilities
# =============================================================================

def _parse_item(item: Any, position: int, source: str) -> FrameBatch:
    if isinstance(item, list):
        strings, frame_index = item, position
    elif isinstance(item, dict):
        if "strings" not in item:
            raise ValueError(f"{source}: item {position} has no 'strings' field")
        strings = item["strings"]
        frame_index = item.get("frame_index", position)
    else:
        raise ValueError(
            f"{source}: item {position} must be a list or an object, got {type(item).__name__}"
        )

    if not isinstance(strings, list) or not all(isinstance(s, str) for s in strings):
        raise ValueError(f"{source}: item {position} strings must be a list of strings")
    if not isinstance(frame_index, int):
        raise ValueError(f"{source}: item {position} frame_index must be an integer")

    return FrameBatch(frame_index=frame_index, strings=list(strings))


def load_frame_batches(input_path: Union[str, Path]) -> List[FrameBatch]:
    """
    Load recorded recognition results.

    Args:
        input_path: JSON file holding a list of batches, or a .jsonl file
            with one batch per line. A batch is either a list of strings or
            an object with "strings" and an optional "frame_index".

    Returns:
        List of FrameBatch in file order
    """
    path = Path(input_path)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")

    batches = []

    if path.suffix.lower() == ".jsonl":
        position = 0
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    item = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"{path}: invalid JSON on line {line_no}: {e}") from e
                batches.append(_parse_item(item, position, str(path)))
                position += 1
    else:
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}: invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise ValueError(f"{path}: top-level JSON value must be a list of batches")

        for position, item in enumerate(data):
            batches.append(_parse_item(item, position, str(path)))

    return batches


def save_events(events: Iterable[Dict[str, Any]], out_path: Path) -> Path:
    """Save the run's stable/flush events to JSON."""
    out_path = Path(out_path)
    out_path.mkdir(parents=True, exist_ok=True)
    json_path = out_path / "events.json"

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(list(events), f, indent=2)

    return json_path


def candidate_to_dict(candidate: Optional[Candidate]) -> Optional[Dict[str, Any]]:
    """Serialize a candidate for event logs."""
    return asdict(candidate) if candidate is not None else None
