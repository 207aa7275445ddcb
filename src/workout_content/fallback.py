"""
Embedded fallback catalog used when ExerciseDB is unreachable.

Records are already in the raw catalog shape so callers can substitute them
for live results without further mapping.
"""

from __future__ import annotations

from .models import ExerciseRecord, SearchFilters


def _rec(id: str, name: str, body_part: str, target: str, equipment: str) -> ExerciseRecord:
    return ExerciseRecord(
        id=id, name=name, body_part=body_part, target=target, equipment=equipment, gif_url=""
    )


FALLBACK_WORKOUTS: tuple[ExerciseRecord, ...] = (
    _rec("fb-pushup", "Push-Up", "chest", "pectorals", "body weight"),
    _rec("fb-squat", "Bodyweight Squat", "upper legs", "glutes", "body weight"),
    _rec("fb-lunge", "Walking Lunge", "upper legs", "quads", "body weight"),
    _rec("fb-plank", "Plank Hold", "core", "abs", "body weight"),
    _rec("fb-burpee", "Burpee", "cardio", "cardiovascular system", "body weight"),
    _rec("fb-row", "Bent-Over Row", "back", "upper back", "dumbbell"),
    _rec("fb-press", "Standing Overhead Press", "shoulders", "delts", "dumbbell"),
    _rec("fb-deadbug", "Dead Bug", "core", "abs", "body weight"),
    _rec("fb-bike", "Stationary Bike", "cardio", "cardiovascular system", "machine"),
    _rec("fb-hipthrust", "Hip Thrust", "glutes", "glutes", "barbell"),
)


def _unique(attr: str) -> list[str]:
    return sorted({getattr(item, attr) for item in FALLBACK_WORKOUTS if getattr(item, attr)})


def unique_body_parts() -> list[str]:
    return _unique("body_part")


def unique_targets() -> list[str]:
    return _unique("target")


def unique_equipment() -> list[str]:
    return _unique("equipment")


def fallback_matches(filters: SearchFilters, limit: int) -> list[ExerciseRecord]:
    """Filter the fallback catalog locally, applying every filter at once."""
    query = (filters.q or "").lower().strip()
    results: list[ExerciseRecord] = []
    for item in FALLBACK_WORKOUTS:
        if filters.body_part and item.body_part.lower() != filters.body_part.lower():
            continue
        if filters.target and item.target.lower() != filters.target.lower():
            continue
        if filters.equipment and item.equipment.lower() != filters.equipment.lower():
            continue
        if query:
            haystack = f"{item.name} {item.body_part} {item.target}".lower()
            if query not in haystack:
                continue
        results.append(item)
    return results[: max(limit, 1)]
