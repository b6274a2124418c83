"""Spin session orchestrator: the spin lifecycle state machine."""
import logging

from fortune.config import Settings, settings as default_settings
from fortune.config_hash import get_config_hash
from fortune.logic.catalog import MachineProfile, get_profile
from fortune.logic.economy import Economy
from fortune.logic.evaluator import LineEvaluator
from fortune.logic.generator import SpinContext, SymbolGenerator
from fortune.logic.models import EconomyState, SpinOutcome, SpinSession, Theme
from fortune.logic.payout import PayoutComposer, PayoutRules
from fortune.logic.reels import spin_progress, stopped_reels
from fortune.logic.rng import RNGBase
from fortune.logic.timers import AsyncioScheduler, Scheduler, TimerHandle
from fortune.notifier import (
    AutoSpinStoppedEvent,
    EventNotifier,
    SpinRejectedEvent,
    SpinSettledEvent,
    SpinStartedEvent,
)
from fortune.protocol import EconomySnapshot, RejectReason, SessionState, SpinPhase
from fortune.validators import validate_stake, validate_stake_adjustment, validate_theme


logger = logging.getLogger(__name__)


class SpinOrchestrator:
    """
    Drives one spin at a time through
    idle -> validating -> spinning -> resolving -> settled -> idle.

    Implements:
    - Admission (at most one spin in flight, affordability gate)
    - Grid generation and the spin-duration timer
    - Resolution: evaluate, compose, settle
    - Auto-spin chaining, pacing and cancellation
    - Turbo timing, stake adjustment, theme selection

    It is the only caller of the generator/evaluator/composer/economy chain.
    """

    def __init__(
        self,
        profile: MachineProfile,
        economy: Economy,
        generator: SymbolGenerator,
        evaluator: LineEvaluator,
        composer: PayoutComposer,
        notifier: EventNotifier,
        scheduler: Scheduler,
        settings: Settings | None = None,
    ):
        self.settings = settings or default_settings
        self.profile = profile
        self.economy = economy
        self.generator = generator
        self.evaluator = evaluator
        self.composer = composer
        self.notifier = notifier
        self.scheduler = scheduler

        self.phase = SpinPhase.IDLE
        self.session: SpinSession | None = None
        self.stake = economy.clamp_stake(self.settings.default_stake)
        self.auto_spin = False
        self.turbo = False
        self.theme: Theme | None = None

        self._settle_timer: TimerHandle | None = None
        self._pacing_timer: TimerHandle | None = None
        self._last_outcome: SpinOutcome | None = None
        self.last_rejection: RejectReason | None = None

    # === Read side ===

    @property
    def last_outcome(self) -> SpinOutcome | None:
        return self._last_outcome

    def snapshot(self) -> EconomySnapshot:
        return self.economy.snapshot()

    def session_state(self) -> SessionState:
        return SessionState(
            phase=self.phase,
            stake=self.stake,
            auto_spin=self.auto_spin,
            turbo=self.turbo,
            theme=self.theme.id if self.theme else None,
            config_hash=get_config_hash(self.settings),
            economy=self.snapshot(),
            reels_stopped=self.visible_reels(),
            progress=self.spin_progress(),
        )

    def spin_duration(self) -> float:
        if self.turbo:
            return self.settings.turbo_spin_duration_seconds
        return self.settings.spin_duration_seconds

    def pacing_delay(self) -> float:
        if self.turbo:
            return self.settings.turbo_autospin_delay_seconds
        return self.settings.autospin_delay_seconds

    def reel_stagger(self) -> float:
        if self.session is not None and self.session.turbo:
            return self.settings.turbo_reel_stagger_seconds
        return self.settings.reel_stagger_seconds

    def visible_reels(self, now: float | None = None) -> list[bool]:
        """Which reels the view should show stopped; all of them when idle."""
        if self.session is None:
            return [True] * self.profile.columns
        now = self.scheduler.now() if now is None else now
        return stopped_reels(self.session, self.profile.columns, self.reel_stagger(), now)

    def spin_progress(self, now: float | None = None) -> float:
        """Fraction of the spin elapsed, for a progress bar; 1.0 when idle."""
        if self.session is None:
            return 1.0
        now = self.scheduler.now() if now is None else now
        return spin_progress(self.session, now)

    # === Commands ===

    def request_spin(self, stake: int | None = None) -> SpinSession | None:
        """
        Ask for a spin. Returns the admitted session, or None if declined.

        Declines are reported as SpinRejected events, never raised. An
        explicit stake outside the configured bounds raises INVALID_STAKE.
        """
        if stake is not None:
            validate_stake(stake, self.settings)
        return self._start_spin(stake, auto=False)

    def set_auto_spin(self, enabled: bool) -> None:
        if enabled == self.auto_spin:
            return
        self.auto_spin = enabled
        if enabled:
            logger.info("Auto-spin enabled")
            if self.phase == SpinPhase.IDLE and self._pacing_timer is None:
                self._schedule_auto_spin()
        else:
            # An in-flight spin still settles; only the chain is cut
            logger.info("Auto-spin disabled")
            self._cancel_pacing()

    def set_turbo(self, enabled: bool) -> None:
        """Applies from the next spin; an in-flight spin keeps its timing."""
        self.turbo = enabled

    def adjust_stake(self, delta: int) -> int:
        validate_stake_adjustment(delta, self.settings)
        self.stake = self.economy.clamp_stake(self.stake + delta)
        return self.stake

    def set_theme(self, theme_id: str | None) -> Theme | None:
        if theme_id is None:
            self.theme = None
        else:
            self.theme = validate_theme(theme_id, self.profile, self.economy.state.level)
        return self.theme

    def regenerate_energy(self, amount: int = 1) -> int:
        """Entry point for the host's periodic regeneration timer."""
        return self.economy.regenerate_energy(amount)

    def close(self) -> None:
        """Stop chaining and settle any in-flight spin immediately."""
        self.auto_spin = False
        self._cancel_pacing()
        if self.phase == SpinPhase.SPINNING and self._settle_timer is not None:
            self._settle_timer.cancel()
            self._resolve()

    # === Lifecycle ===

    def _start_spin(self, stake: int | None, auto: bool) -> SpinSession | None:
        stake = self.stake if stake is None else stake

        if self.phase != SpinPhase.IDLE:
            if auto:
                # A manual spin got in first; its settlement re-chains
                logger.debug("Auto-spin attempt skipped: spin in progress")
                return None
            logger.debug("Spin request ignored: spin in progress")
            self.last_rejection = RejectReason.SPIN_IN_PROGRESS
            self.notifier.publish(
                SpinRejectedEvent(reason=RejectReason.SPIN_IN_PROGRESS, stake=stake)
            )
            return None

        self.phase = SpinPhase.VALIDATING
        reason = self.economy.check_spin(stake)
        if reason is not None:
            self.last_rejection = reason
            self.phase = SpinPhase.IDLE
            logger.info("Spin rejected: reason=%s stake=%d", reason.value, stake)
            self.notifier.publish(SpinRejectedEvent(reason=reason, stake=stake))
            if auto:
                self._stop_auto_spin(reason)
            return None

        self.economy.begin_spin(stake)
        self.last_rejection = None
        self.stake = stake

        now = self.scheduler.now()
        duration = self.spin_duration()
        session = SpinSession(
            stake=stake,
            turbo=self.turbo,
            auto=self.auto_spin,
            theme_id=self.theme.id if self.theme else None,
            started_at=now,
            settle_at=now + duration,
        )
        self.session = session
        self.phase = SpinPhase.SPINNING
        logger.debug("Spin started: round=%s stake=%d turbo=%s", session.round_id, stake, self.turbo)
        self.notifier.publish(
            SpinStartedEvent(
                round_id=session.round_id,
                stake=stake,
                turbo=session.turbo,
                auto=session.auto,
            )
        )

        context = SpinContext(level=self.economy.state.level, theme=self.theme)
        session.grid = self.generator.generate_grid(context)
        self._settle_timer = self.scheduler.call_later(duration, self._resolve)
        return session

    def _resolve(self) -> None:
        self._settle_timer = None
        session = self.session
        if session is None:
            return

        try:
            self.phase = SpinPhase.RESOLVING
            theme = self.profile.get_theme(session.theme_id) if session.theme_id else None
            wins = self.evaluator.evaluate(session.grid)
            outcome = self.composer.compose(wins, session.stake, self.economy.state, theme)
            self.economy.settle_spin(outcome)
            self._last_outcome = outcome

            self.phase = SpinPhase.SETTLED
            logger.info(
                "Spin settled: round=%s stake=%d payout=%d tier=%s",
                session.round_id,
                session.stake,
                outcome.total_payout,
                outcome.win_tier.value,
            )
            self.notifier.publish(SpinSettledEvent(round_id=session.round_id, outcome=outcome))

            if self.auto_spin:
                reason = self.economy.check_spin(self.stake)
                if reason is None:
                    self._schedule_auto_spin()
                else:
                    self._stop_auto_spin(reason)
        finally:
            self.session = None
            self.phase = SpinPhase.IDLE

    # === Auto-spin ===

    def _schedule_auto_spin(self) -> None:
        self._cancel_pacing()
        self._pacing_timer = self.scheduler.call_later(self.pacing_delay(), self._auto_spin_tick)

    def _auto_spin_tick(self) -> None:
        self._pacing_timer = None
        if not self.auto_spin:
            return
        self._start_spin(None, auto=True)

    def _cancel_pacing(self) -> None:
        if self._pacing_timer is not None:
            self._pacing_timer.cancel()
            self._pacing_timer = None

    def _stop_auto_spin(self, reason: RejectReason) -> None:
        self.auto_spin = False
        self._cancel_pacing()
        logger.info("Auto-spin stopped: reason=%s", reason.value)
        self.notifier.publish(AutoSpinStoppedEvent(reason=reason))


def build_orchestrator(
    settings: Settings | None = None,
    profile: MachineProfile | None = None,
    rng: RNGBase | None = None,
    scheduler: Scheduler | None = None,
    notifier: EventNotifier | None = None,
    state: EconomyState | None = None,
    generator: SymbolGenerator | None = None,
) -> SpinOrchestrator:
    """
    Wire an orchestrator from settings.

    Configuration errors (unknown profile, empty catalog or lines, bad
    economy settings) surface here, never during a spin.
    """
    settings = settings or default_settings
    profile = profile or get_profile(settings.profile)
    notifier = notifier or EventNotifier()
    economy = Economy(settings=settings, notifier=notifier, state=state)
    orchestrator = SpinOrchestrator(
        profile=profile,
        economy=economy,
        generator=generator or SymbolGenerator(profile, rng=rng, settings=settings),
        evaluator=LineEvaluator(profile.lines),
        composer=PayoutComposer(PayoutRules.from_settings(settings)),
        notifier=notifier,
        scheduler=scheduler or AsyncioScheduler(),
        settings=settings,
    )
    if settings.theme is not None:
        orchestrator.set_theme(settings.theme)
    return orchestrator
