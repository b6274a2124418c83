"""Weighted symbol generator: rarity bands, level bonus, theme filtering."""
from dataclasses import dataclass
from decimal import Decimal

from fortune.config import Settings, settings as default_settings
from fortune.logic.catalog import RARITY_DRAW_ORDER, MachineProfile
from fortune.logic.models import Rarity, Symbol, Theme
from fortune.logic.rng import ProductionRNG, RNGBase


@dataclass(frozen=True)
class SpinContext:
    """Inputs that bias a draw: player level and active theme."""

    level: int = 1
    theme: Theme | None = None


class SymbolGenerator:
    """
    Draws one symbol at a time.

    A uniform draw in [0, 1) selects a rarity band from cumulative weights
    (legendary first), then a second draw picks uniformly among symbols of
    that rarity in the active theme. If the theme has none, the whole
    catalog is used instead.
    """

    def __init__(
        self,
        profile: MachineProfile,
        rng: RNGBase | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or default_settings
        self.profile = profile
        self.rng = rng or ProductionRNG()
        self._bonus_step = Decimal(str(settings.legendary_level_bonus_step))
        self._bonus_cap = Decimal(str(settings.legendary_level_bonus_cap))

    def band_weights(self, level: int) -> dict[Rarity, Decimal]:
        """Rarity weights after moving the level bonus from common to legendary."""
        weights = dict(self.profile.rarity_weights)
        bonus = min(level * self._bonus_step, self._bonus_cap)
        bonus = max(Decimal(0), min(bonus, weights[Rarity.COMMON]))
        weights[Rarity.LEGENDARY] += bonus
        weights[Rarity.COMMON] -= bonus
        return weights

    def pick_rarity(self, level: int) -> Rarity:
        weights = self.band_weights(level)
        roll = Decimal(str(self.rng.random()))
        cumulative = Decimal(0)
        for rarity in RARITY_DRAW_ORDER:
            cumulative += weights[rarity]
            if roll < cumulative:
                return rarity
        # Rounding left a sliver above the last band
        return Rarity.COMMON

    def next(self, context: SpinContext) -> Symbol:
        """Return one symbol for the given context. Never raises."""
        rarity = self.pick_rarity(context.level)
        pool = self.profile.symbols_of(rarity)
        if context.theme is not None:
            pool = tuple(s for s in pool if context.theme.id in s.themes)
        if not pool:
            pool = self.profile.symbols
        return pool[self.rng.randbelow(len(pool))]

    def generate_grid(self, context: SpinContext) -> list[list[Symbol]]:
        """Fill a fresh grid, one draw per cell, column by column."""
        return [
            [self.next(context) for _ in range(self.profile.rows)]
            for _ in range(self.profile.columns)
        ]
