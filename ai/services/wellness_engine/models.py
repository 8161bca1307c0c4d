
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import date, datetime, timedelta
from typing import List, Dict, Optional, Any, Union

# Display/tie-break order. The first five are the classifier categories in
# evaluation order; the rest are labels that only arrive from stored rows.
EMOTION_TAXONOMY = [
    "Calm", "Excited", "Stressed", "Sad", "Angry",
    "Happy", "Anxious", "Lonely", "Confused", "Overwhelmed", "Neutral",
]
DISTRIBUTION_EMOTIONS = ["Happy", "Calm", "Anxious", "Sad", "Angry", "Overwhelmed"]

DEFAULT_EMOTION = "Neutral"
NO_SECONDARY = "None"
DEFAULT_INTENSITY = 5
DEFAULT_SCORE = 50

CALENDAR_UNITS = ("day", "week", "month", "year")


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat(timespec="seconds") if ts else None


@dataclass
class EntryRecord:
    id: str
    text: str
    timestamp: datetime  # tz-aware
    emotion: str         # Title Case label
    intensity: float     # 0..10
    source: str = "journal"

    def to_dict(self):
        d = asdict(self)
        d["timestamp"] = _iso(self.timestamp)
        return d


@dataclass
class AssessmentRecord:
    id: str
    test_name: str
    category: str
    score: float         # 0..100
    timestamp: datetime  # tz-aware
    test_id: Optional[str] = None

    def to_dict(self):
        d = asdict(self)
        d["timestamp"] = _iso(self.timestamp)
        return d


Record = Union[EntryRecord, AssessmentRecord]


@dataclass
class Rejection:
    index: int
    record_id: Optional[str]
    reason: str


@dataclass
class NormalizeResult:
    records: List[Any]
    rejected: List[Rejection] = field(default_factory=list)

    def to_dict(self):
        return {
            "records": [r.to_dict() for r in self.records],
            "rejected": [asdict(r) for r in self.rejected],
        }


@dataclass(frozen=True)
class WindowSpec:
    kind: str                   # "calendar" | "rolling"
    unit: Optional[str] = None  # calendar only: day|week|month|year
    rolling_days: Optional[int] = None

    def __post_init__(self):
        if self.kind == "calendar":
            if self.unit not in CALENDAR_UNITS:
                raise ValueError(f"calendar window needs unit in {CALENDAR_UNITS}, got {self.unit!r}")
        elif self.kind == "rolling":
            if not isinstance(self.rolling_days, int) or self.rolling_days < 1:
                raise ValueError(f"rolling window needs days >= 1, got {self.rolling_days!r}")
        else:
            raise ValueError(f"unknown window kind {self.kind!r}")

    @classmethod
    def calendar(cls, unit: str) -> "WindowSpec":
        return cls(kind="calendar", unit=unit)

    @classmethod
    def rolling(cls, days: int) -> "WindowSpec":
        return cls(kind="rolling", rolling_days=days)

    def bounds(self, today: date) -> tuple:
        """Inclusive (first, last) local dates covered by this window."""
        if self.kind == "rolling":
            return today - timedelta(days=self.rolling_days - 1), today
        if self.unit == "day":
            return today, today
        if self.unit == "week":
            return today - timedelta(days=6), today
        if self.unit == "month":
            first = today.replace(day=1)
            nxt = (first + timedelta(days=32)).replace(day=1)
            return first, nxt - timedelta(days=1)
        return date(today.year, 1, 1), date(today.year, 12, 31)

    def days(self, today: date) -> int:
        """Bucket count for a series ending today."""
        if self.kind == "rolling":
            return self.rolling_days
        if self.unit == "day":
            return 1
        if self.unit == "week":
            return 7
        if self.unit == "month":
            return today.day
        return today.timetuple().tm_yday

    def label(self) -> str:
        return f"{self.rolling_days}d" if self.kind == "rolling" else str(self.unit)


@dataclass
class Bucket:
    date_key: str  # YYYY-MM-DD (local)
    value: Optional[float]

    def to_dict(self):
        return asdict(self)


@dataclass
class WellnessSnapshot:
    total_count: int
    journal_count: int
    assessment_count: int
    journal_average: float
    assessment_average10: float
    blended_score: float
    dominant_emotion: str
    secondary_emotion: str
    emotion_counts: Dict[str, int]
    emotion_distribution: Dict[str, float] = field(default_factory=dict)

    def to_dict(self):
        return asdict(self)


@dataclass
class StreakDay:
    date_key: str
    weekday: str  # Mon..Sun
    active: bool
    missed: bool
    future: bool


@dataclass
class StreakState:
    current_streak: int
    last_7_days: List[StreakDay]

    def to_dict(self):
        return asdict(self)
