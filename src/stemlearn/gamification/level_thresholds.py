"""Level thresholds and computation.

Thresholds are total XP; a user is at the highest level whose threshold
they have reached. Level 20 is the cap.
"""

from __future__ import annotations

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Beginner", "xp_required": 0},
    {"level": 2, "title": "Learner", "xp_required": 100},
    {"level": 3, "title": "Explorer", "xp_required": 250},
    {"level": 4, "title": "Scholar", "xp_required": 500},
    {"level": 5, "title": "Scientist", "xp_required": 800},
    {"level": 6, "title": "Researcher", "xp_required": 1200},
    {"level": 7, "title": "Expert", "xp_required": 1700},
    {"level": 8, "title": "Innovator", "xp_required": 2300},
    {"level": 9, "title": "Pioneer", "xp_required": 3000},
    {"level": 10, "title": "Master", "xp_required": 3800},
    {"level": 11, "title": "Genius", "xp_required": 4700},
    {"level": 12, "title": "Legend", "xp_required": 5700},
    {"level": 13, "title": "Sage", "xp_required": 6800},
    {"level": 14, "title": "Virtuoso", "xp_required": 8000},
    {"level": 15, "title": "Prodigy", "xp_required": 9300},
    {"level": 16, "title": "Luminary", "xp_required": 10700},
    {"level": 17, "title": "Visionary", "xp_required": 12200},
    {"level": 18, "title": "Oracle", "xp_required": 13800},
    {"level": 19, "title": "Titan", "xp_required": 15500},
    {"level": 20, "title": "Einstein", "xp_required": 17300},
]

MAX_LEVEL = LEVEL_THRESHOLDS[-1]["level"]


def _bracket(total_xp: int) -> tuple[dict, dict]:
    """Return (current, next) threshold entries; next == current at the cap."""
    for i in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if total_xp >= LEVEL_THRESHOLDS[i]["xp_required"]:
            current = LEVEL_THRESHOLDS[i]
            nxt = LEVEL_THRESHOLDS[i + 1] if i + 1 < len(LEVEL_THRESHOLDS) else current
            return current, nxt
    # Negative XP never occurs in the store, but stays on level 1.
    return LEVEL_THRESHOLDS[0], LEVEL_THRESHOLDS[1]


def level_for_xp(total_xp: int) -> int:
    return _bracket(total_xp)[0]["level"]


def progress_to_next(total_xp: int) -> float:
    """Percent (0-100) of the way from the current level to the next."""
    current, nxt = _bracket(total_xp)
    span = nxt["xp_required"] - current["xp_required"]
    if span <= 0:
        return 100.0
    pct = (total_xp - current["xp_required"]) / span * 100
    return max(0.0, min(100.0, pct))


def compute_level(total_xp: int) -> dict:
    """Compute full level info from total XP."""
    current, nxt = _bracket(total_xp)
    xp_for_level = nxt["xp_required"] - current["xp_required"]

    # At max level, avoid division by zero
    if xp_for_level == 0:
        xp_for_level = 1

    return {
        "level": current["level"],
        "title": current["title"],
        "xp_into_level": max(0, total_xp - current["xp_required"]),
        "xp_for_level": xp_for_level,
        "next_level": nxt["level"],
        "next_title": nxt["title"],
        "progress": progress_to_next(total_xp),
    }
