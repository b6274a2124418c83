"""Command validators for stakes, stake adjustments and themes."""
from fortune.config import Settings
from fortune.errors import ErrorCode, GameError
from fortune.logic.catalog import MachineProfile
from fortune.logic.models import Theme


def validate_stake(stake: int, settings: Settings) -> None:
    """
    Validate an explicit spin stake.

    Raises INVALID_STAKE if stake is outside [min_stake, max_stake]. A stake
    above the balance is not an error here; the spin is declined instead.
    """
    if not settings.min_stake <= stake <= settings.max_stake:
        raise GameError(
            ErrorCode.INVALID_STAKE,
            f"Stake {stake} not allowed. "
            f"Allowed: {settings.min_stake}..{settings.max_stake}",
        )


def validate_stake_adjustment(delta: int, settings: Settings) -> None:
    """
    Validate a stake adjustment.

    Raises INVALID_STAKE_ADJUSTMENT unless delta is a non-zero multiple of
    the configured step.
    """
    if delta == 0 or delta % settings.stake_step != 0:
        raise GameError(
            ErrorCode.INVALID_STAKE_ADJUSTMENT,
            f"Stake adjustment {delta} must be a non-zero multiple of {settings.stake_step}.",
        )


def validate_theme(theme_id: str, profile: MachineProfile, level: int) -> Theme:
    """
    Resolve a theme for the current player level.

    Raises INVALID_REQUEST for unknown themes and THEME_LOCKED below the
    unlock level.
    """
    theme = profile.get_theme(theme_id)
    if theme is None:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"Unknown theme {theme_id!r} for profile {profile.name!r}.",
        )
    if level < theme.unlock_level:
        raise GameError(
            ErrorCode.THEME_LOCKED,
            f"Theme {theme_id!r} unlocks at level {theme.unlock_level}.",
        )
    return theme
