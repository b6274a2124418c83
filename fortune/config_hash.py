"""Config hash computation for simulation audits.

The hash covers every setting that changes spin economics, so two audit
runs with the same hash and seed are comparable:
- audit_sim.py (CSV summary row)
- GET /state (host diagnostics)
"""
import hashlib
import json

from fortune.config import Settings, settings as default_settings


def get_config_hash(settings: Settings | None = None) -> str:
    """
    Generate hash of the economy-relevant configuration.

    Returns 16-char hex hash of the config snapshot.
    """
    settings = settings or default_settings
    config_snapshot = {
        "profile": settings.profile,
        "theme": settings.theme,
        "max_energy": settings.max_energy,
        "experience_per_level": settings.experience_per_level,
        "experience_divisor": settings.experience_divisor,
        "level_up_bonus": settings.level_up_bonus,
        "stakes": [settings.min_stake, settings.max_stake, settings.stake_step],
        "streak_bonus": [settings.streak_bonus_step, settings.streak_bonus_cap],
        "level_bonus_step": settings.level_bonus_step,
        "global_multiplier": settings.global_multiplier,
        "tiers": [settings.jackpot_threshold_x, settings.big_win_threshold_x],
        "legendary_level_bonus": [
            settings.legendary_level_bonus_step,
            settings.legendary_level_bonus_cap,
        ],
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
