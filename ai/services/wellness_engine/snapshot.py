
from __future__ import annotations
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from .models import (
    EntryRecord, AssessmentRecord, WellnessSnapshot, WindowSpec,
    EMOTION_TAXONOMY, DISTRIBUTION_EMOTIONS, DEFAULT_EMOTION, NO_SECONDARY,
)
from .timeutil import resolve_now, round_half_up
from .window import filter_by_window

# Clinical assessments are trusted more than casual mood logging.
JOURNAL_WEIGHT = 0.3
ASSESSMENT_WEIGHT = 0.7
RECENT_ASSESSMENTS = 5

_TAXONOMY_RANK = {name: i for i, name in enumerate(EMOTION_TAXONOMY)}


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def rank_emotions(entries: Sequence[EntryRecord]) -> Tuple[List[str], Dict[str, int]]:
    """Labels ordered by (count desc, avg intensity desc, taxonomy order, name)."""
    counts: Dict[str, int] = defaultdict(int)
    isum: Dict[str, float] = defaultdict(float)
    for e in entries:
        counts[e.emotion] += 1
        isum[e.emotion] += e.intensity

    def key(label: str):
        return (
            -counts[label],
            -(isum[label] / counts[label]),
            _TAXONOMY_RANK.get(label, len(EMOTION_TAXONOMY)),
            label,
        )

    return sorted(counts, key=key), dict(counts)


def journal_average(entries: Sequence[EntryRecord]) -> float:
    return round_half_up(_mean([e.intensity for e in entries]), 1)


def assessment_average10(assessments: Sequence[AssessmentRecord]) -> float:
    """Mean of the most recent scores, rescaled 0..100 -> 0..10."""
    recent = sorted(assessments, key=lambda a: a.timestamp)[-RECENT_ASSESSMENTS:]
    return round_half_up(_mean([a.score for a in recent]) / 10.0, 1)


def blend(journal_avg: float, assess_avg10: float, has_journal: bool, has_assessment: bool) -> float:
    if has_journal and has_assessment:
        score = JOURNAL_WEIGHT * journal_avg + ASSESSMENT_WEIGHT * assess_avg10
    elif has_assessment:
        score = assess_avg10
    elif has_journal:
        score = journal_avg
    else:
        return 0.0
    return round_half_up(min(max(score, 0.0), 10.0), 1)


def emotion_distribution(counts: Dict[str, int], total: int) -> Dict[str, float]:
    if total <= 0:
        return {k: 0.0 for k in DISTRIBUTION_EMOTIONS}
    return {k: round_half_up(counts.get(k, 0) * 100.0 / total, 1) for k in DISTRIBUTION_EMOTIONS}


def aggregate(entries: Sequence[EntryRecord], assessments: Sequence[AssessmentRecord]) -> WellnessSnapshot:
    """Snapshot over records already narrowed to one window."""
    ordered, counts = rank_emotions(entries)
    j_avg = journal_average(entries)
    a_avg = assessment_average10(assessments)
    return WellnessSnapshot(
        total_count=len(entries) + len(assessments),
        journal_count=len(entries),
        assessment_count=len(assessments),
        journal_average=j_avg,
        assessment_average10=a_avg,
        blended_score=blend(j_avg, a_avg, bool(entries), bool(assessments)),
        dominant_emotion=ordered[0] if ordered else DEFAULT_EMOTION,
        secondary_emotion=ordered[1] if len(ordered) > 1 else NO_SECONDARY,
        emotion_counts=counts,
        emotion_distribution=emotion_distribution(counts, len(entries)),
    )


def compute_snapshot(
    entries: Sequence[EntryRecord],
    assessments: Sequence[AssessmentRecord],
    window: WindowSpec,
    now: Optional[datetime] = None,
) -> WellnessSnapshot:
    now = resolve_now(now)
    return aggregate(filter_by_window(entries, window, now), filter_by_window(assessments, window, now))
