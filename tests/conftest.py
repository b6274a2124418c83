"""Pytest fixtures for engine tests."""
from collections.abc import Iterable
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from fortune.config import Settings
from fortune.logic.catalog import STANDARD_PROFILE, MachineProfile
from fortune.logic.engine import SpinOrchestrator, build_orchestrator
from fortune.logic.generator import SpinContext
from fortune.logic.models import EconomyState, Grid, Symbol
from fortune.logic.rng import RNGBase
from fortune.logic.timers import VirtualScheduler
from fortune.main import app
from fortune.notifier import EventNotifier, GameEvent


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (long headless simulations)"
    )


# Columns left to right; no line matches
LOSING_IDS = [
    ["tiger", "fox", "frog"],
    ["fox", "frog", "tiger"],
    ["orange", "scroll", "envelope"],
]

# Only the middle row matches (three tigers)
MIDDLE_TIGER_IDS = [
    ["fox", "tiger", "frog"],
    ["frog", "tiger", "fox"],
    ["orange", "tiger", "scroll"],
]


def make_grid(columns: list[list[str]], profile: MachineProfile = STANDARD_PROFILE) -> Grid:
    """Build a grid from symbol ids, column by column."""
    by_id = {s.id: s for s in profile.symbols}
    return [[by_id[symbol_id] for symbol_id in column] for column in columns]


class RecordingSubscriber:
    """Subscriber that records every event for assertions."""

    def __init__(self):
        self.events: list[GameEvent] = []

    def __call__(self, event: GameEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]

    def of(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()


class ScriptedRNG(RNGBase):
    """RNG that replays scripted values, for exact band and pick control."""

    def __init__(self, randoms: Iterable[float] = (), picks: Iterable[int] = ()):
        self._randoms = list(randoms)
        self._picks = list(picks)

    def random(self) -> float:
        return self._randoms.pop(0) if self._randoms else 0.99

    def randbelow(self, n: int) -> int:
        pick = self._picks.pop(0) if self._picks else 0
        return pick % n


class ScriptedGenerator:
    """Stands in for SymbolGenerator; hands out queued grids, then losing ones."""

    def __init__(self, grids: Iterable[Grid] = (), profile: MachineProfile = STANDARD_PROFILE):
        self.profile = profile
        self._grids = list(grids)
        self.contexts: list[SpinContext] = []

    def queue(self, *grids: Grid) -> None:
        self._grids.extend(grids)

    def generate_grid(self, context: SpinContext) -> list[list[Symbol]]:
        self.contexts.append(context)
        if self._grids:
            return self._grids.pop(0)
        return make_grid(LOSING_IDS, self.profile)


@pytest.fixture
def settings() -> Settings:
    """Default economy settings, independent of the environment."""
    return Settings(_env_file=None, profile="standard", theme=None)


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def recorder() -> RecordingSubscriber:
    return RecordingSubscriber()


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def make_orchestrator(
    settings: Settings,
    scheduler: VirtualScheduler,
    recorder: RecordingSubscriber,
    generator: ScriptedGenerator,
):
    """Factory for orchestrators on the virtual clock with a scripted generator."""

    def factory(state: EconomyState | None = None, **overrides) -> SpinOrchestrator:
        run_settings = settings.model_copy(update=overrides) if overrides else settings
        notifier = EventNotifier()
        notifier.subscribe(recorder)
        return build_orchestrator(
            settings=run_settings,
            profile=STANDARD_PROFILE,
            scheduler=scheduler,
            notifier=notifier,
            state=state,
            generator=generator,
        )

    return factory


@pytest.fixture
def orchestrator(make_orchestrator) -> SpinOrchestrator:
    return make_orchestrator()


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """TestClient with the lifespan running (fresh session per test)."""
    with TestClient(app) as client:
        yield client
