"""Engine configuration derived from the environment (FORTUNE_* variables)."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings with the economy defaults of the zodiac machines."""

    model_config = ConfigDict(env_prefix="FORTUNE_")

    # Host
    debug: bool = False
    log_level: str = "INFO"

    # Machine selection
    profile: str = "standard"
    theme: str | None = "classic"

    # Starting economy
    starting_currency: int = 1000
    starting_energy: int = 5
    max_energy: int = 10
    starting_level: int = 1
    starting_experience: int = 0

    # Energy regeneration cadence (driven by the host, not the core)
    energy_regen_seconds: float = 60.0

    # Progression
    experience_per_level: int = 1000  # flat threshold, same at every level
    experience_divisor: int = 10  # 1 XP per 10 currency won
    level_up_bonus: int = 500

    # Stakes
    min_stake: int = 50
    max_stake: int = 1000
    stake_step: int = 50
    default_stake: int = 100

    # Spin timing (seconds)
    spin_duration_seconds: float = 2.5
    turbo_spin_duration_seconds: float = 0.8
    autospin_delay_seconds: float = 1.5
    turbo_autospin_delay_seconds: float = 0.5
    reel_stagger_seconds: float = 0.15
    turbo_reel_stagger_seconds: float = 0.05

    # Payout multiplier stacking
    streak_bonus_step: float = 0.1
    streak_bonus_cap: float = 1.0
    level_bonus_step: float = 0.05
    global_multiplier: float = 1.0

    # Win tiers, as multiples of the stake
    jackpot_threshold_x: int = 20
    big_win_threshold_x: int = 5

    # Legendary band bonus per player level
    legendary_level_bonus_step: float = 0.01
    legendary_level_bonus_cap: float = 0.05

    # Host event history
    event_log_size: int = 200


settings = Settings()
