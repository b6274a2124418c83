"""Tests for the economy state machine."""
from decimal import Decimal

import pytest

from conftest import RecordingSubscriber
from fortune.config import Settings
from fortune.errors import ConfigurationError, ErrorCode, GameError
from fortune.logic.catalog import STANDARD_PROFILE
from fortune.logic.economy import Economy
from fortune.logic.models import EconomyState, SpinOutcome, WinResult
from fortune.notifier import EventNotifier, LevelUpEvent
from fortune.protocol import RejectReason


def _economy(state: EconomyState | None = None, **overrides) -> tuple[Economy, RecordingSubscriber]:
    settings = Settings(_env_file=None, **overrides)
    notifier = EventNotifier()
    recorder = RecordingSubscriber()
    notifier.subscribe(recorder)
    return Economy(settings=settings, notifier=notifier, state=state), recorder


def _win(payout: int, experience: int | None = None, stake: int = 100) -> SpinOutcome:
    tiger = STANDARD_PROFILE.symbols[0]
    return SpinOutcome(
        stake=stake,
        wins=[WinResult(symbol=tiger, line_id="middle", payout_weight=Decimal(1), payout=payout)],
        total_payout=payout,
        experience_gained=payout // 10 if experience is None else experience,
    )


def _loss(stake: int = 100) -> SpinOutcome:
    return SpinOutcome(stake=stake)


class TestDefaults:
    """Starting state from settings."""

    def test_starting_snapshot(self):
        economy, _ = _economy()
        snap = economy.snapshot()
        assert snap.currency == 1000
        assert snap.energy == 5
        assert snap.max_energy == 10
        assert snap.level == 1
        assert snap.experience == 0
        assert snap.experience_to_next_level == 1000
        assert snap.win_streak == 0
        assert snap.total_spins == 0
        assert snap.total_currency_earned == 0

    def test_threshold_is_flat_across_levels(self):
        economy, _ = _economy(EconomyState(currency=1000, energy=5, level=7, experience=999))
        assert economy.experience_to_next_level() == 1000
        assert economy.snapshot().experience_to_next_level == 1000


class TestSpinGate:
    """Affordability checks and deduction."""

    def test_begin_spin_deducts_energy_and_stake(self):
        economy, _ = _economy()
        economy.begin_spin(100)
        assert economy.state.energy == 4
        assert economy.state.currency == 900

    def test_energy_checked_before_currency(self):
        economy, _ = _economy(EconomyState(currency=10, energy=0))
        assert economy.check_spin(100) == RejectReason.INSUFFICIENT_ENERGY

    def test_insufficient_currency(self):
        economy, _ = _economy(EconomyState(currency=99, energy=3))
        assert economy.check_spin(100) == RejectReason.INSUFFICIENT_CURRENCY
        assert economy.can_afford_spin(99) is True

    def test_exact_balance_is_affordable(self):
        economy, _ = _economy(EconomyState(currency=100, energy=1))
        economy.begin_spin(100)
        assert economy.state.currency == 0
        assert economy.state.energy == 0

    @pytest.mark.parametrize(
        "state,stake,code",
        [
            (EconomyState(currency=1000, energy=0), 100, ErrorCode.INSUFFICIENT_ENERGY),
            (EconomyState(currency=50, energy=5), 100, ErrorCode.INSUFFICIENT_CURRENCY),
            (EconomyState(currency=1000, energy=5), 0, ErrorCode.INVALID_STAKE),
        ],
    )
    def test_refusal_leaves_state_untouched(self, state, stake, code):
        economy, _ = _economy(state)
        before = economy.state.model_copy()
        with pytest.raises(GameError) as exc_info:
            economy.begin_spin(stake)
        assert exc_info.value.code == code
        assert economy.state == before


class TestSettlement:
    """Crediting winnings, streaks and counters."""

    def test_conservation_on_win(self):
        """after = before - stake + payout, credited exactly once."""
        economy, _ = _economy()
        economy.begin_spin(100)
        economy.settle_spin(_win(250))
        assert economy.state.currency == 1000 - 100 + 250
        assert economy.state.total_currency_earned == 250
        assert economy.state.experience == 25

    def test_conservation_on_loss(self):
        economy, _ = _economy()
        economy.begin_spin(100)
        economy.settle_spin(_loss())
        assert economy.state.currency == 900
        assert economy.state.total_currency_earned == 0

    def test_streak_counts_and_resets(self):
        economy, _ = _economy()
        for _ in range(3):
            economy.begin_spin(100)
            economy.settle_spin(_win(120))
        assert economy.state.win_streak == 3
        economy.begin_spin(100)
        economy.settle_spin(_loss())
        assert economy.state.win_streak == 0
        assert economy.state.total_spins == 4

    def test_total_earned_is_monotonic(self):
        economy, _ = _economy()
        seen = []
        for outcome in (_win(300), _loss(), _win(50), _loss()):
            economy.begin_spin(100)
            economy.settle_spin(outcome)
            seen.append(economy.state.total_currency_earned)
        assert seen == sorted(seen)


class TestLevelUp:
    """Level thresholds, carry-over and bonuses."""

    def test_carry_over(self):
        """950 + 200 experience at level 1 -> level 2 with 150 carried."""
        economy, recorder = _economy(EconomyState(currency=1000, energy=5, experience=950))
        economy.begin_spin(100)
        events = economy.settle_spin(_win(2000, experience=200))

        assert economy.state.level == 2
        assert economy.state.experience == 150
        assert economy.state.currency == 1000 - 100 + 2000 + 500
        assert economy.state.total_currency_earned == 2000 + 500
        assert events == [LevelUpEvent(new_level=2, bonus=500)]
        assert recorder.of(LevelUpEvent) == events

    def test_multiple_levels_in_one_settlement(self):
        economy, recorder = _economy()
        economy.begin_spin(100)
        events = economy.settle_spin(_win(35_000, experience=3500))

        assert economy.state.level == 4
        assert economy.state.experience == 500
        assert [e.new_level for e in events] == [2, 3, 4]
        assert economy.state.currency == 1000 - 100 + 35_000 + 3 * 500
        assert len(recorder.events) == 3

    def test_carry_over_above_level_one(self):
        """950 + 100 experience at level 2 -> level 3 with 50 carried."""
        economy, recorder = _economy(
            EconomyState(currency=1000, energy=5, level=2, experience=950)
        )
        economy.begin_spin(100)
        economy.settle_spin(_win(1000, experience=100))

        assert economy.state.level == 3
        assert economy.state.experience == 50
        assert [e.new_level for e in recorder.of(LevelUpEvent)] == [3]

    def test_exact_threshold_levels_up(self):
        economy, _ = _economy(EconomyState(currency=1000, energy=5, experience=900))
        economy.begin_spin(100)
        economy.settle_spin(_win(1000, experience=100))
        assert economy.state.level == 2
        assert economy.state.experience == 0

    def test_just_below_threshold(self):
        economy, recorder = _economy(EconomyState(currency=1000, energy=5, experience=900))
        economy.begin_spin(100)
        economy.settle_spin(_win(990, experience=99))
        assert economy.state.level == 1
        assert economy.state.experience == 999
        assert recorder.events == []

    def test_custom_bonus(self):
        economy, _ = _economy(level_up_bonus=0)
        economy.begin_spin(100)
        economy.settle_spin(_win(10_000, experience=1000))
        assert economy.state.level == 2
        assert economy.state.currency == 900 + 10_000


class TestEnergy:
    """Regeneration up to the cap."""

    def test_regenerate_one(self):
        economy, _ = _economy()
        assert economy.regenerate_energy() == 1
        assert economy.state.energy == 6

    def test_regenerate_is_capped(self):
        economy, _ = _economy(EconomyState(currency=0, energy=9))
        assert economy.regenerate_energy(5) == 1
        assert economy.state.energy == 10
        assert economy.regenerate_energy() == 0
        assert economy.state.energy == 10

    def test_negative_amount_adds_nothing(self):
        economy, _ = _economy()
        assert economy.regenerate_energy(-3) == 0
        assert economy.state.energy == 5


class TestClampStake:
    """Stake clamping against bounds and balance."""

    @pytest.mark.parametrize(
        "currency,value,expected",
        [
            (1000, 100, 100),
            (1000, 20, 50),
            (5000, 4000, 1000),
            (300, 500, 300),
            (30, 100, 50),
        ],
    )
    def test_clamp(self, currency, value, expected):
        economy, _ = _economy(EconomyState(currency=currency, energy=5))
        assert economy.clamp_stake(value) == expected


class TestConstruction:
    """Invalid settings or starting state are rejected up front."""

    @pytest.mark.parametrize(
        "state",
        [
            EconomyState(currency=-1, energy=5),
            EconomyState(currency=100, energy=11),
            EconomyState(currency=100, energy=-1),
            EconomyState(currency=100, energy=5, level=0),
            EconomyState(currency=100, energy=5, experience=1000),
            EconomyState(currency=100, energy=0, max_energy=0),
        ],
    )
    def test_bad_state(self, state):
        with pytest.raises(ConfigurationError):
            _economy(state)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"experience_per_level": 0},
            {"experience_divisor": 0},
            {"min_stake": 0},
            {"min_stake": 500, "max_stake": 100},
            {"stake_step": 0},
        ],
    )
    def test_bad_settings(self, overrides):
        with pytest.raises(ConfigurationError):
            _economy(**overrides)
