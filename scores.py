from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union


class MoodScore(str, Enum):
    poor = "poor"
    ok = "ok"
    great = "great"


class DietAdherence(str, Enum):
    off = "off"
    over_half = "over_half"
    full = "full"


class WorkoutType(str, Enum):
    rest = "rest"
    alternative = "alternative"
    gym = "gym"


ScoredValue = Union[MoodScore, DietAdherence, WorkoutType]


@dataclass(frozen=True)
class TagStyle:
    label: str
    background: str
    color: str


_RED = ("#fee2e2", "#ef4444")
_AMBER = ("#fef3c7", "#d97706")
_GREEN = ("#dcfce7", "#16a34a")

SLEEP_STYLES: dict[MoodScore, TagStyle] = {
    MoodScore.poor: TagStyle("Poor", *_RED),
    MoodScore.ok: TagStyle("OK", *_AMBER),
    MoodScore.great: TagStyle("Great", *_GREEN),
}

LIBIDO_STYLES: dict[MoodScore, TagStyle] = {
    MoodScore.poor: TagStyle("Low", *_RED),
    MoodScore.ok: TagStyle("OK", *_AMBER),
    MoodScore.great: TagStyle("High", *_GREEN),
}

DIET_STYLES: dict[DietAdherence, TagStyle] = {
    DietAdherence.off: TagStyle("Off", *_RED),
    DietAdherence.over_half: TagStyle("> 50%", *_AMBER),
    DietAdherence.full: TagStyle("100%", *_GREEN),
}

WORKOUT_STYLES: dict[WorkoutType, TagStyle] = {
    WorkoutType.rest: TagStyle("Off", "#f1f5f9", "#64748b"),
    WorkoutType.alternative: TagStyle("Other", "#fce7f3", "#be185d"),
    WorkoutType.gym: TagStyle("Gym", "#e0e7ff", "#4338ca"),
}

DIMENSIONS: dict[str, tuple[type[Enum], Mapping]] = {
    "sleep": (MoodScore, SLEEP_STYLES),
    "libido": (MoodScore, LIBIDO_STYLES),
    "diet": (DietAdherence, DIET_STYLES),
    "workout_type": (WorkoutType, WORKOUT_STYLES),
}


def _check_total() -> None:
    for dimension, (enum_cls, styles) in DIMENSIONS.items():
        missing = [member.value for member in enum_cls if member not in styles]
        if missing:
            raise RuntimeError(
                f"No display style for {dimension} values: {', '.join(missing)}"
            )


_check_total()


def style_for(dimension: str, value: Optional[ScoredValue]) -> Optional[TagStyle]:
    if value is None:
        return None
    try:
        enum_cls, styles = DIMENSIONS[dimension]
    except KeyError as exc:
        raise ValueError(f"Unknown scored dimension: {dimension}") from exc
    return styles[enum_cls(value)]


def display_table() -> dict[str, list[dict[str, str]]]:
    return {
        dimension: [
            {
                "value": member.value,
                "label": styles[member].label,
                "background": styles[member].background,
                "color": styles[member].color,
            }
            for member in enum_cls
        ]
        for dimension, (enum_cls, styles) in DIMENSIONS.items()
    }
