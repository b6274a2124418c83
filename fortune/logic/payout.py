"""Payout composition: stake, multiplier stacking and win tiers."""
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

from fortune.config import Settings, settings as default_settings
from fortune.logic.models import EconomyState, Rarity, SpinOutcome, Theme, WinResult
from fortune.protocol import WinTier


def floor_to_int(value: Decimal) -> int:
    """Truncate to whole currency units."""
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


@dataclass(frozen=True)
class PayoutRules:
    """Multiplier-stacking coefficients and tier thresholds."""

    streak_bonus_step: Decimal = Decimal("0.1")
    streak_bonus_cap: Decimal = Decimal("1.0")
    level_bonus_step: Decimal = Decimal("0.05")
    global_multiplier: Decimal = Decimal("1")
    jackpot_threshold_x: int = 20
    big_win_threshold_x: int = 5
    experience_divisor: int = 10

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PayoutRules":
        settings = settings or default_settings
        return cls(
            streak_bonus_step=Decimal(str(settings.streak_bonus_step)),
            streak_bonus_cap=Decimal(str(settings.streak_bonus_cap)),
            level_bonus_step=Decimal(str(settings.level_bonus_step)),
            global_multiplier=Decimal(str(settings.global_multiplier)),
            jackpot_threshold_x=settings.jackpot_threshold_x,
            big_win_threshold_x=settings.big_win_threshold_x,
            experience_divisor=settings.experience_divisor,
        )


class PayoutComposer:
    """
    Converts line matches into a SpinOutcome.

    raw = stake * base_multiplier * line weight, per result. The stacking
    factor (1 + streak bonus + level bonus) * global multiplier is computed
    once for the spin from the pre-settlement state and applied to every
    result, each floored to whole units before summing.
    """

    def __init__(self, rules: PayoutRules | None = None):
        self.rules = rules or PayoutRules.from_settings()

    def streak_bonus(self, win_streak: int) -> Decimal:
        return min(win_streak * self.rules.streak_bonus_step, self.rules.streak_bonus_cap)

    def level_bonus(self, level: int) -> Decimal:
        return level * self.rules.level_bonus_step

    def stacking_factor(self, state: EconomyState, theme: Theme | None = None) -> Decimal:
        global_multiplier = self.rules.global_multiplier
        if theme is not None:
            global_multiplier *= theme.multiplier
        return (
            1 + self.streak_bonus(state.win_streak) + self.level_bonus(state.level)
        ) * global_multiplier

    def classify(self, total_payout: int, stake: int) -> WinTier:
        if total_payout <= 0:
            return WinTier.NONE
        if total_payout >= stake * self.rules.jackpot_threshold_x:
            return WinTier.JACKPOT
        if total_payout >= stake * self.rules.big_win_threshold_x:
            return WinTier.BIG
        return WinTier.WIN

    def compose(
        self,
        wins: list[WinResult],
        stake: int,
        state: EconomyState,
        theme: Theme | None = None,
    ) -> SpinOutcome:
        """Build the outcome for one spin. Does not touch the state."""
        factor = self.stacking_factor(state, theme)

        paid: list[WinResult] = []
        for win in wins:
            raw = stake * win.symbol.base_multiplier * win.payout_weight
            paid.append(
                win.model_copy(update={"raw_payout": raw, "payout": floor_to_int(raw * factor)})
            )

        total_payout = sum(w.payout for w in paid)
        tier = self.classify(total_payout, stake)

        return SpinOutcome(
            stake=stake,
            wins=paid,
            total_payout=total_payout,
            experience_gained=total_payout // self.rules.experience_divisor,
            multiplier=factor,
            win_tier=tier,
            jackpot=tier == WinTier.JACKPOT,
            legendary_hit=any(w.symbol.rarity == Rarity.LEGENDARY for w in paid),
            streak_delta=1 if paid else -state.win_streak,
        )
