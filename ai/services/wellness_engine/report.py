
from __future__ import annotations
import csv
import io
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional, Sequence
from .models import EntryRecord, AssessmentRecord, WellnessSnapshot, WindowSpec, Bucket
from .series import compute_series
from .snapshot import aggregate
from .timeutil import resolve_now, round_half_up
from .window import filter_by_window

# Clinical-style summary for the report screen and its CSV export.
# Policy:
# - "today" covers the current calendar day; "history" covers 7/30/90 rolling days.
# - Wellness figures come from aggregate(), the fold the insights view uses.
# - Recommendations are fixed rule text, evaluated in a fixed order.

HISTORY_DAYS = (7, 30, 90)
TREND_DAYS = 7

@dataclass(frozen=True)
class WellnessBand:
    floor: float
    label: str
    overview: str
    why: str
    plan: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "overview": self.overview, "why": self.why, "plan": list(self.plan)}


# Highest floor first.
WELLNESS_BANDS: List[WellnessBand] = [
    WellnessBand(
        7.0, "Thriving",
        "You are emotionally energized and functioning at high quality.",
        "Habits + environment are reinforcing positive momentum.",
        ["Keep social engagement active", "Maintain sleep & hydration routines", "Challenge yourself with one growth task"],
    ),
    WellnessBand(
        5.0, "Stable",
        "Your mental state is consistent with mild fluctuations.",
        "Demands and recovery are balanced.",
        ["Set one joyful activity per day", "Small goal improvements weekly", "Expand supportive relationships"],
    ),
    WellnessBand(
        3.0, "Vulnerable",
        "Emotional strain is noticeable and energy dips more often.",
        "Stress > recovery",
        ["Use guided breathing once/day", "Reduce workload by one item", "Join one mild social interaction"],
    ),
    WellnessBand(
        0.0, "Overwhelmed",
        "You may feel stuck, hopeless, easily exhausted.",
        "Brain is guarding energy; survival mode triggered.",
        ["Sleep priority tonight (non-negotiable)", "Tiny win: 2-minute achievable task", "Talk to someone supportive or professional if persistent"],
    ),
]


@dataclass
class WellnessReport:
    mode: str     # "today" | "history"
    period: str   # "1d" / "30d" ...
    generated_at: str
    snapshot: WellnessSnapshot
    avg_test_score: int
    wellness_status: str
    wellness_band: str
    band: WellnessBand
    mood_series: List[Bucket]
    assessment_series: List[Bucket]
    trend_7d: List[Bucket]
    recommendations: List[str]
    entries: List[EntryRecord] = field(default_factory=list)
    assessments: List[AssessmentRecord] = field(default_factory=list)
    tz: Optional[tzinfo] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "period": self.period,
            "generated_at": self.generated_at,
            "snapshot": self.snapshot.to_dict(),
            "avg_test_score": self.avg_test_score,
            "wellness_status": self.wellness_status,
            "wellness_band": self.wellness_band,
            "band": self.band.to_dict(),
            "mood_series": [b.to_dict() for b in self.mood_series],
            "assessment_series": [b.to_dict() for b in self.assessment_series],
            "trend_7d": [b.to_dict() for b in self.trend_7d],
            "recommendations": list(self.recommendations),
            "entries": [e.to_dict() for e in self.entries],
            "assessments": [a.to_dict() for a in self.assessments],
        }


def severity(score: float, kind: str) -> str:
    if kind == "assessment":
        if score >= 80:
            return "High"
        if score >= 50:
            return "Moderate"
        return "Low/Concern"
    if score >= 7:
        return "Positive"
    if score >= 4:
        return "Neutral"
    return "Negative"


def wellness_status(score: float) -> str:
    if score >= 7:
        return "OPTIMAL"
    if score >= 4:
        return "STABLE"
    return "ATTENTION"


def band_for(score: float) -> WellnessBand:
    for band in WELLNESS_BANDS:
        if score >= band.floor:
            return band
    return WELLNESS_BANDS[-1]


def wellness_band(score: float) -> str:
    return band_for(score).label


def recommendations_for(snapshot: WellnessSnapshot, avg_test_score: float) -> List[str]:
    out: List[str] = []
    if snapshot.blended_score < 5:
        out.append("Prioritize immediate stress reduction techniques.")
    if snapshot.journal_count > 0:
        out.append("Continue maintaining your journaling consistency.")
    if snapshot.assessment_count > 0 and avg_test_score < 60:
        out.append("Consider retaking clinical assessments in 7 days.")
    if not out:
        out.append("Maintain current healthy routine.")
    return out


def report_window(mode: str, days: int) -> WindowSpec:
    if mode == "today":
        return WindowSpec.calendar("day")
    if mode == "history":
        if days not in HISTORY_DAYS:
            raise ValueError(f"history days must be one of {HISTORY_DAYS}, got {days!r}")
        return WindowSpec.rolling(days)
    raise ValueError(f"unknown report mode {mode!r}")


def build_report(
    entries: Sequence[EntryRecord],
    assessments: Sequence[AssessmentRecord],
    mode: str = "history",
    days: int = 30,
    now: Optional[datetime] = None,
) -> WellnessReport:
    now = resolve_now(now)
    window = report_window(mode, days)
    f_entries = sorted(filter_by_window(entries, window, now), key=lambda e: e.timestamp, reverse=True)
    f_assess = sorted(filter_by_window(assessments, window, now), key=lambda a: a.timestamp, reverse=True)

    snapshot = aggregate(f_entries, f_assess)
    scores = [a.score for a in f_assess]
    avg_test = int(round_half_up(sum(scores) / len(scores), 0)) if scores else 0
    n_days = window.days(now.date())

    return WellnessReport(
        mode=mode,
        period=f"{n_days}d",
        generated_at=now.isoformat(timespec="seconds"),
        snapshot=snapshot,
        avg_test_score=avg_test,
        wellness_status=wellness_status(snapshot.blended_score),
        wellness_band=wellness_band(snapshot.blended_score),
        band=band_for(snapshot.blended_score),
        mood_series=compute_series(f_entries, "intensity", n_days, now),
        assessment_series=compute_series(f_assess, "score", n_days, now),
        trend_7d=compute_series(entries, "intensity", TREND_DAYS, now),
        recommendations=recommendations_for(snapshot, avg_test),
        entries=f_entries,
        assessments=f_assess,
        tz=now.tzinfo,
    )


def _date_time(ts: datetime, tz) -> List[str]:
    local = ts.astimezone(tz)
    return [local.date().isoformat(), local.strftime("%H:%M")]


def export_csv(report: WellnessReport) -> str:
    tz = report.tz or datetime.fromisoformat(report.generated_at).tzinfo
    buf = io.StringIO()
    w = csv.writer(buf)
    snap = report.snapshot
    kind = "Daily Snapshot" if report.mode == "today" else f"Historical ({report.period})"
    w.writerow(["WELLNESS DATA EXPORT"])
    w.writerow(["Generated Date", report.generated_at])
    w.writerow(["Report Type", kind])
    w.writerow([])
    w.writerow(["EXECUTIVE SUMMARY"])
    w.writerow(["Metric", "Value", "Status"])
    w.writerow(["Wellness Score", f"{snap.blended_score}/10", report.wellness_status])
    w.writerow(["Wellness Band", report.band.label, report.band.overview])
    w.writerow(["Clinical Average", f"{report.avg_test_score}%", "-"])
    w.writerow(["Total Activities", snap.total_count, "-"])
    w.writerow([])
    w.writerow(["DETAILED LOGS"])
    w.writerow(["Date", "Time", "Activity Type", "Name/Emotion", "Score (Raw)", "Interpretation", "Notes/Details"])
    for a in report.assessments:
        w.writerow([
            *_date_time(a.timestamp, tz), "Assessment",
            a.test_name, f"{a.score:g}%", severity(a.score, "assessment"), a.category,
        ])
    for e in report.entries:
        w.writerow([
            *_date_time(e.timestamp, tz), "Journal",
            e.emotion, f"{e.intensity:g}/10", severity(e.intensity, "journal"), e.text,
        ])
    return buf.getvalue()
