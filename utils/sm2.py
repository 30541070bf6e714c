import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from utils.errors import InvalidQualityError, InvalidStateError

MIN_EASE_FACTOR = 1.3
INITIAL_EASE_FACTOR = 2.5
MAX_INTERVAL_DAYS = 36500

# Rating buttons shown in the review UI, lowest to highest.
QUALITY_RATINGS = {
    'again': 0,
    'hard': 1,
    'good': 2,
    'easy': 3,
    'perfect': 4,
    'excellent': 5,
}

QUALITY_DESCRIPTIONS = {
    5: "Perfect response",
    4: "Correct response after a hesitation",
    3: "Correct response recalled with serious difficulty",
    2: "Incorrect response; where the correct one seemed easy to recall",
    1: "Incorrect response; the correct one remembered",
    0: "Complete blackout",
}


@dataclass(frozen=True)
class Sm2Settings:
    min_ease_factor: float = MIN_EASE_FACTOR
    first_interval: int = 1
    second_interval: int = 6
    maximum_interval: int = MAX_INTERVAL_DAYS


@dataclass(frozen=True)
class Sm2Result:
    ease_factor: float
    repetitions: int
    interval_days: int


DEFAULT_SETTINGS = Sm2Settings()


def settings_from_config(config: Dict[str, Any]) -> Sm2Settings:
    """Build engine settings from the [scheduler] config section."""
    scheduler = config.get("scheduler", {})
    return Sm2Settings(
        min_ease_factor=float(scheduler.get("min_ease_factor", MIN_EASE_FACTOR)),
        first_interval=int(scheduler.get("first_interval", 1)),
        second_interval=int(scheduler.get("second_interval", 6)),
        maximum_interval=int(scheduler.get("maximum_interval", MAX_INTERVAL_DAYS)),
    )


def map_rating_to_quality(rating: str) -> int:
    """Map a rating button label ("Again".."Excellent") to SM-2 quality (0-5)."""
    try:
        return QUALITY_RATINGS[rating.strip().lower()]
    except (KeyError, AttributeError):
        raise InvalidQualityError(f"Unknown rating: {rating!r}") from None


def quality_description(quality: int) -> str:
    validate_quality(quality)
    return QUALITY_DESCRIPTIONS[quality]


def validate_quality(quality: Any) -> int:
    # bool is an int subclass but True/False are not ratings
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(f"Quality must be an integer 0-5, got {quality!r}")
    if not 0 <= quality <= 5:
        raise InvalidQualityError(f"Quality must be between 0 and 5, got {quality}")
    return quality


def _validate_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidStateError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidStateError(f"{name} must be non-negative, got {value}")
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ease_delta(quality: int) -> float:
    miss = 5 - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


def calculate(
    quality: int,
    repetitions: int,
    ease_factor: float,
    interval_days: int,
    settings: Optional[Sm2Settings] = None,
) -> Sm2Result:
    """Compute the next SM-2 scheduling state for a card.

    Args:
        quality: Recall rating 0-5 (0=complete blackout, 5=perfect).
        repetitions: Consecutive successful reviews since the last lapse.
        ease_factor: Current ease factor. Values below the floor are
            raised to it before the update.
        interval_days: Current interval in days (0 for a new card).
        settings: Engine constants; defaults to classic SM-2.

    Returns:
        Sm2Result with the new ease factor, repetitions and interval.

    Raises:
        InvalidQualityError: quality is not an integer in 0..5.
        InvalidStateError: repetitions/interval negative, or ease not a
            finite number.
    """
    settings = settings or DEFAULT_SETTINGS
    validate_quality(quality)
    _validate_count("repetitions", repetitions)
    _validate_count("interval_days", interval_days)
    if isinstance(ease_factor, bool) or not isinstance(ease_factor, (int, float)):
        raise InvalidStateError(f"ease_factor must be a number, got {ease_factor!r}")
    ease_factor = float(ease_factor)
    if not math.isfinite(ease_factor):
        raise InvalidStateError(f"ease_factor must be finite, got {ease_factor}")
    ease_factor = max(settings.min_ease_factor, ease_factor)

    new_ef = max(settings.min_ease_factor, ease_factor + ease_delta(quality))

    if quality < 3:
        return Sm2Result(ease_factor=new_ef, repetitions=0, interval_days=1)

    new_repetitions = repetitions + 1
    if new_repetitions == 1:
        new_interval = settings.first_interval
    elif new_repetitions == 2:
        new_interval = settings.second_interval
    else:
        new_interval = max(1, _round_half_up(interval_days * new_ef))
        new_interval = min(new_interval, settings.maximum_interval)
    return Sm2Result(ease_factor=new_ef, repetitions=new_repetitions, interval_days=new_interval)
