
from __future__ import annotations
import math
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple

# Rule-based emotion scorer for free-text journal entries.
# Phrases weigh 3, single words weigh 1; matching is substring containment on
# the lower-cased text. Evaluation order matters: a later category only wins
# with a strictly greater score, so ties go to the earliest declared one and
# "calm" (declared first) is also the zero-match answer.

PHRASE_WEIGHT = 3
WORD_WEIGHT = 1
MIN_INTENSITY = 3
MAX_INTENSITY = 10
DEFAULT_CATEGORY = "calm"

CATEGORIES: List[Tuple[str, Dict[str, List[str]]]] = [
    ("calm", {
        "phrases": ["at peace", "chilling out", "slow day"],
        "words": ["calm", "peace", "peaceful", "relax", "relaxed", "chill", "quiet", "meditate", "breathe", "sleep"],
    }),
    ("excited", {
        "phrases": ["can't wait", "looking forward", "on cloud nine", "over the moon"],
        "words": ["happy", "joy", "excited", "great", "awesome", "fantastic", "proud", "love", "amazing"],
    }),
    ("stressed", {
        "phrases": ["freaking out", "at my limit", "too much", "burn out"],
        "words": ["stressed", "overwhelmed", "deadline", "pressure", "anxiety", "anxious", "panic", "busy", "tired", "tense"],
    }),
    ("sad", {
        "phrases": ["feeling down", "broken hearted", "give up", "lost hope"],
        "words": ["sad", "cry", "crying", "depressed", "lonely", "alone", "hurt", "pain", "grief"],
    }),
    ("angry", {
        "phrases": ["fed up", "sick of", "pissed off"],
        "words": ["angry", "mad", "furious", "rage", "hate", "annoyed", "irritated", "frustrated"],
    }),
]

GUIDANCE: Dict[str, str] = {
    "happy": "Joy is a vital resource. Share this news with a loved one.",
    "excited": "Joy is a vital resource. Share this news with a loved one.",
    "sad": "Low mood creates a 'lethargy trap'. Try moving for 2 minutes.",
    "anxious": "Use 'Box Breathing': inhale 4s, hold 4s, exhale 4s, hold 4s.",
    "stressed": "Try 'Progressive Muscle Relaxation': squeeze shoulders for 5s, release.",
    "calm": "Use this balance for 'Mindful Reflection'.",
    "lonely": "Try 'Micro-Connections': text a friend.",
    "confused": "Practice 'Values Alignment'.",
    "angry": "Use 'The 90-Second Rule': breathe through the surge.",
}
DEFAULT_GUIDANCE = "Take a deep breath."


@dataclass
class EmotionResult:
    emotion: str    # lower-case category key
    intensity: int  # 3..10
    scores: Dict[str, int]

    def to_dict(self):
        return asdict(self)


def score_categories(text: str) -> Dict[str, int]:
    lower = (text or "").lower()
    out: Dict[str, int] = {}
    for name, table in CATEGORIES:
        s = 0
        for phrase in table["phrases"]:
            if phrase in lower:
                s += PHRASE_WEIGHT
        for word in table["words"]:
            if word in lower:
                s += WORD_WEIGHT
        out[name] = s
    return out


def intensity_from_score(max_score: int) -> int:
    return min(max(math.ceil(max_score * 1.5) + 3, MIN_INTENSITY), MAX_INTENSITY)


def classify_emotion(text: str) -> EmotionResult:
    scores = score_categories(text)
    best, best_score = DEFAULT_CATEGORY, 0
    for name, _ in CATEGORIES:
        if scores[name] > best_score:
            best, best_score = name, scores[name]
    return EmotionResult(emotion=best, intensity=intensity_from_score(best_score), scores=scores)


def guidance_for(emotion: str) -> str:
    return GUIDANCE.get((emotion or "").strip().lower(), DEFAULT_GUIDANCE)
