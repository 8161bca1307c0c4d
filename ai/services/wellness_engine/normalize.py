
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import math
from .models import (
    EntryRecord, AssessmentRecord, NormalizeResult, Rejection,
    DEFAULT_EMOTION, DEFAULT_INTENSITY, DEFAULT_SCORE,
)
from .timeutil import parse_timestamp

# Canonicalizes rows coming from the remote table (snake_case columns) or the
# local fallback file (camelCase keys written by older clients). Bad rows are
# returned as Rejection items; nothing here raises on data.

_MISSING = object()


class _Reject(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def _first(row: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        v = row.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return _MISSING


def title_case(label: Any) -> str:
    s = str(label or "").strip()
    if not s:
        return DEFAULT_EMOTION
    return " ".join(w[:1].upper() + w[1:].lower() for w in s.split())


def _number(raw: Any, default: float, lo: float, hi: float, reason: str) -> float:
    if raw is _MISSING:
        return float(default)
    if isinstance(raw, bool):
        raise _Reject(reason)
    try:
        v = float(raw)
    except (TypeError, ValueError):
        raise _Reject(reason)
    if math.isnan(v) or math.isinf(v):
        raise _Reject(reason)
    return min(max(v, lo), hi)


def _timestamp(row: Dict[str, Any]):
    raw = _first(row, "created_at", "date", "timestamp")
    ts = parse_timestamp(raw) if raw is not _MISSING else None
    if ts is None:
        raise _Reject("bad_timestamp")
    return ts


def _row_id(row: Dict[str, Any], index: int) -> str:
    raw = _first(row, "id")
    return str(raw) if raw is not _MISSING else f"local-{index}"


def normalize_entry(row: Any, index: int = 0) -> EntryRecord:
    """Raises _Reject; use normalize_entries for the non-raising contract."""
    if not isinstance(row, dict):
        raise _Reject("not_a_mapping")
    ts = _timestamp(row)
    intensity = _number(_first(row, "emotion_score", "intensity"), DEFAULT_INTENSITY, 0.0, 10.0, "non_numeric_intensity")
    emotion = _first(row, "detected_emotion", "emotion")
    text = _first(row, "input_text", "text")
    source = _first(row, "source")
    return EntryRecord(
        id=_row_id(row, index),
        text=str(text) if text is not _MISSING else "",
        timestamp=ts,
        emotion=title_case(emotion if emotion is not _MISSING else DEFAULT_EMOTION),
        intensity=intensity,
        source=str(source) if source is not _MISSING else "journal",
    )


def normalize_assessment(row: Any, index: int = 0) -> AssessmentRecord:
    if not isinstance(row, dict):
        raise _Reject("not_a_mapping")
    ts = _timestamp(row)
    score = _number(_first(row, "score"), DEFAULT_SCORE, 0.0, 100.0, "non_numeric_score")
    name = _first(row, "test_name", "testName")
    category = _first(row, "category")
    test_id = _first(row, "test_id", "testId")
    return AssessmentRecord(
        id=_row_id(row, index),
        test_name=str(name) if name is not _MISSING else "Unknown Test",
        category=str(category) if category is not _MISSING else "General",
        score=score,
        timestamp=ts,
        test_id=str(test_id) if test_id is not _MISSING else None,
    )


def _normalize_all(rows: Optional[Iterable[Any]], fn) -> NormalizeResult:
    records: List[Any] = []
    rejected: List[Rejection] = []
    for i, row in enumerate(rows or []):
        try:
            records.append(fn(row, i))
        except _Reject as exc:
            rid = row.get("id") if isinstance(row, dict) else None
            rejected.append(Rejection(index=i, record_id=str(rid) if rid is not None else None, reason=exc.reason))
    return NormalizeResult(records=records, rejected=rejected)


def normalize_entries(rows: Optional[Iterable[Any]]) -> NormalizeResult:
    return _normalize_all(rows, normalize_entry)


def normalize_assessments(rows: Optional[Iterable[Any]]) -> NormalizeResult:
    return _normalize_all(rows, normalize_assessment)


def entry_to_row(entry: EntryRecord, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Remote column layout for an entry (emotion stored lower-case)."""
    row: Dict[str, Any] = {
        "input_text": entry.text,
        "detected_emotion": entry.emotion.lower(),
        "emotion_score": entry.intensity,
        "source": entry.source,
        "created_at": entry.timestamp.isoformat(),
    }
    if user_id:
        row["user_id"] = user_id
    return row


def assessment_to_row(a: AssessmentRecord, user_id: Optional[str] = None) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "test_id": a.test_id,
        "test_name": a.test_name,
        "category": a.category,
        "score": a.score,
        "created_at": a.timestamp.isoformat(),
    }
    if user_id:
        row["user_id"] = user_id
    return row

