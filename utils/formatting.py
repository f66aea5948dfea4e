"""Display formatting for scores and margins."""

from models import GameScore, ScoringType


def format_guesses(count: float) -> str:
    """Format a guess count, singular only at exactly 1."""
    n = int(count)
    return f"{n} guess" if n == 1 else f"{n} guesses"


def format_seconds(seconds: float) -> str:
    return f"{seconds:.1f}s"


def format_value(value: float, scoring_type: ScoringType) -> str:
    """Format a raw score value for its scoring type."""
    if scoring_type == ScoringType.TIME:
        return format_seconds(value)
    return format_guesses(value)


def format_margin(margin: float, scoring_type: ScoringType, tie_label: str | None = None) -> str:
    """Format the gap between two scores.

    With ``tie_label`` set, a zero guess margin is shown as that label instead.
    """
    if scoring_type == ScoringType.TIME:
        return format_seconds(margin)
    if tie_label is not None and margin == 0:
        return tie_label
    return format_guesses(margin)


def format_score(score: GameScore, scoring_type: ScoringType) -> str:
    value = score.value_for(scoring_type)
    if value is None:
        return ""
    return format_value(value, scoring_type)
