"""Event notifier: lifecycle and outcome events for external collaborators."""
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from fortune.logic.models import SpinOutcome
from fortune.protocol import EventKind, RejectReason


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpinStartedEvent:
    """A spin passed validation; energy and stake are already deducted."""

    kind: ClassVar[EventKind] = EventKind.SPIN_STARTED

    round_id: str
    stake: int
    turbo: bool
    auto: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for delivery."""
        return {
            "type": self.kind.value,
            "round_id": self.round_id,
            "stake": self.stake,
            "turbo": self.turbo,
            "auto": self.auto,
        }


@dataclass(frozen=True)
class SpinSettledEvent:
    """A spin resolved and its payout was credited (win or no-win)."""

    kind: ClassVar[EventKind] = EventKind.SPIN_SETTLED

    round_id: str
    outcome: SpinOutcome

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "round_id": self.round_id,
            "outcome": self.outcome.model_dump(mode="json"),
        }


@dataclass(frozen=True)
class LevelUpEvent:
    """One level gained during settlement."""

    kind: ClassVar[EventKind] = EventKind.LEVEL_UP

    new_level: int
    bonus: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "new_level": self.new_level, "bonus": self.bonus}


@dataclass(frozen=True)
class AutoSpinStoppedEvent:
    """Auto-spin was switched off by the engine."""

    kind: ClassVar[EventKind] = EventKind.AUTO_SPIN_STOPPED

    reason: RejectReason

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "reason": self.reason.value}


@dataclass(frozen=True)
class SpinRejectedEvent:
    """A spin request was declined; economy state is untouched."""

    kind: ClassVar[EventKind] = EventKind.SPIN_REJECTED

    reason: RejectReason
    stake: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "reason": self.reason.value, "stake": self.stake}


GameEvent = (
    SpinStartedEvent
    | SpinSettledEvent
    | LevelUpEvent
    | AutoSpinStoppedEvent
    | SpinRejectedEvent
)

Subscriber = Callable[[GameEvent], None]


class LoggingSubscriber:
    """Default subscriber that logs events."""

    def __call__(self, event: GameEvent) -> None:
        logger.info("EVENT %s: %s", event.kind.value, event.to_dict())


class EventLog:
    """Bounded history of recent events, for hosts that poll."""

    def __init__(self, maxlen: int = 200):
        self._events: deque[dict[str, Any]] = deque(maxlen=maxlen)

    def __call__(self, event: GameEvent) -> None:
        self._events.append(event.to_dict())

    def recent(self, limit: int | None = None) -> list[dict[str, Any]]:
        events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> None:
        self._events.clear()


class EventNotifier:
    """
    Publish/subscribe channel.

    Delivery is synchronous, in publish order, to subscribers in
    subscription order. A failing subscriber never breaks the spin.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._delivery_errors = 0

    @property
    def delivery_errors(self) -> int:
        return self._delivery_errors

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber. Returns a function that unsubscribes it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, event: GameEvent) -> None:
        for subscriber in list(self._subscribers):
            self._safe_deliver(subscriber, event)

    def _safe_deliver(self, subscriber: Subscriber, event: GameEvent) -> None:
        """
        Deliver event with exception safety.

        Subscriber failures MUST NOT break the spin lifecycle.
        """
        try:
            subscriber(event)
        except Exception as e:
            self._delivery_errors += 1
            logger.warning(
                "Event subscriber error (count=%d): %s - %s",
                self._delivery_errors,
                event.kind.value,
                str(e),
            )
