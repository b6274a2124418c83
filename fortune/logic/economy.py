"""Economy state machine: currency, energy, progression and streaks."""
import logging

from fortune.config import Settings, settings as default_settings
from fortune.errors import ConfigurationError, ErrorCode, GameError
from fortune.logic.models import EconomyState, SpinOutcome
from fortune.notifier import EventNotifier, LevelUpEvent
from fortune.protocol import EconomySnapshot, RejectReason


logger = logging.getLogger(__name__)


class Economy:
    """
    Sole owner of the EconomyState.

    begin_spin is the only place energy and stake are deducted and
    settle_spin the only place winnings are credited, exactly once per spin.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        notifier: EventNotifier | None = None,
        state: EconomyState | None = None,
    ):
        self.settings = settings or default_settings
        self.notifier = notifier or EventNotifier()
        self._state = state or EconomyState(
            currency=self.settings.starting_currency,
            energy=self.settings.starting_energy,
            max_energy=self.settings.max_energy,
            level=self.settings.starting_level,
            experience=self.settings.starting_experience,
        )
        self._validate()

    def _validate(self) -> None:
        s = self._state
        if self.settings.experience_per_level <= 0:
            raise ConfigurationError("experience_per_level must be positive.")
        if self.settings.experience_divisor <= 0:
            raise ConfigurationError("experience_divisor must be positive.")
        if not 0 < self.settings.min_stake <= self.settings.max_stake:
            raise ConfigurationError("Stake bounds must satisfy 0 < min_stake <= max_stake.")
        if self.settings.stake_step <= 0:
            raise ConfigurationError("stake_step must be positive.")
        if s.max_energy < 1:
            raise ConfigurationError("max_energy must be at least 1.")
        if s.currency < 0:
            raise ConfigurationError("Starting currency cannot be negative.")
        if not 0 <= s.energy <= s.max_energy:
            raise ConfigurationError(f"Starting energy must be within [0, {s.max_energy}].")
        if s.level < 1:
            raise ConfigurationError("Starting level must be at least 1.")
        if not 0 <= s.experience < self.experience_to_next_level():
            raise ConfigurationError("Starting experience must be below the level threshold.")

    @property
    def state(self) -> EconomyState:
        """Live state, for read-only use by the composer and orchestrator."""
        return self._state

    def experience_to_next_level(self) -> int:
        """Experience needed for the next level; the same at every level."""
        return self.settings.experience_per_level

    def snapshot(self) -> EconomySnapshot:
        s = self._state
        return EconomySnapshot(
            currency=s.currency,
            energy=s.energy,
            max_energy=s.max_energy,
            level=s.level,
            experience=s.experience,
            experience_to_next_level=self.experience_to_next_level(),
            win_streak=s.win_streak,
            total_spins=s.total_spins,
            total_currency_earned=s.total_currency_earned,
        )

    # === Spin gate ===

    def check_spin(self, stake: int) -> RejectReason | None:
        """Why a spin at this stake cannot start, or None if it can."""
        if self._state.energy < 1:
            return RejectReason.INSUFFICIENT_ENERGY
        if self._state.currency < stake:
            return RejectReason.INSUFFICIENT_CURRENCY
        return None

    def can_afford_spin(self, stake: int) -> bool:
        return self.check_spin(stake) is None

    def begin_spin(self, stake: int) -> None:
        """
        Deduct one energy and the stake.

        Raises GameError without mutating anything if the spin is not
        affordable.
        """
        if stake <= 0:
            raise GameError(ErrorCode.INVALID_STAKE, f"Stake must be positive, got {stake}.")
        reason = self.check_spin(stake)
        if reason == RejectReason.INSUFFICIENT_ENERGY:
            raise GameError(ErrorCode.INSUFFICIENT_ENERGY, "No energy left to spin.")
        if reason == RejectReason.INSUFFICIENT_CURRENCY:
            raise GameError(
                ErrorCode.INSUFFICIENT_CURRENCY,
                f"Stake {stake} exceeds balance {self._state.currency}.",
            )
        self._state.energy -= 1
        self._state.currency -= stake

    def settle_spin(self, outcome: SpinOutcome) -> list[LevelUpEvent]:
        """
        Credit the outcome of a spin and resolve level-ups.

        Returns the level-up events, already published, in order.
        """
        s = self._state
        s.currency += outcome.total_payout
        s.total_currency_earned += outcome.total_payout
        s.experience += outcome.experience_gained
        s.win_streak = s.win_streak + 1 if outcome.is_win else 0
        s.total_spins += 1

        level_ups: list[LevelUpEvent] = []
        while s.experience >= self.experience_to_next_level():
            s.experience -= self.experience_to_next_level()
            s.level += 1
            bonus = self.settings.level_up_bonus
            s.currency += bonus
            s.total_currency_earned += bonus
            event = LevelUpEvent(new_level=s.level, bonus=bonus)
            level_ups.append(event)
            logger.info("Level up: level=%d bonus=%d", s.level, bonus)
            self.notifier.publish(event)

        return level_ups

    # === Energy ===

    def regenerate_energy(self, amount: int = 1) -> int:
        """Add energy up to the cap. Returns how much was actually added."""
        s = self._state
        added = max(0, min(amount, s.max_energy - s.energy))
        s.energy += added
        return added

    # === Stake ===

    def clamp_stake(self, value: int) -> int:
        """Clamp into [min_stake, min(max_stake, currency)], never below min_stake."""
        upper = min(self.settings.max_stake, self._state.currency)
        return max(self.settings.min_stake, min(value, upper))
