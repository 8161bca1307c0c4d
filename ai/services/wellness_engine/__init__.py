
from .models import (
    EntryRecord, AssessmentRecord, WindowSpec, Bucket, WellnessSnapshot,
    StreakDay, StreakState, NormalizeResult, Rejection, EMOTION_TAXONOMY,
)
from .classifier import classify_emotion, guidance_for, EmotionResult
from .normalize import normalize_entries, normalize_assessments, entry_to_row, assessment_to_row
from .window import filter_by_window, parse_window
from .series import compute_series
from .snapshot import aggregate, compute_snapshot
from .streak import compute_streak
from .report import build_report, export_csv, WellnessReport, WellnessBand
