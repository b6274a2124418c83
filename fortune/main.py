"""Fortune Engine host: one spin session behind a small FastAPI surface.

The engine itself is transport-free; this module owns what the core leaves
to its host: the event loop, the periodic energy regeneration timer and an
event history for polling clients.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query

from fortune.config import settings
from fortune.logic.engine import SpinOrchestrator, build_orchestrator
from fortune.logic.timers import AsyncioScheduler
from fortune.middleware import ErrorHandlerMiddleware
from fortune.notifier import EventLog, EventNotifier, LoggingSubscriber
from fortune.protocol import (
    EventsResponse,
    SessionState,
    SpinRequest,
    SpinResponse,
    StakeAdjustRequest,
    StakeResponse,
    ThemeRequest,
    ToggleRequest,
)


logger = logging.getLogger(__name__)


async def regenerate_energy_forever(orchestrator: SpinOrchestrator, interval: float) -> None:
    """Periodic regeneration timer: one energy point per interval."""
    while True:
        await asyncio.sleep(interval)
        added = orchestrator.regenerate_energy()
        if added:
            logger.debug("Energy regenerated: energy=%d", orchestrator.economy.state.energy)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the session on the serving loop and run the regeneration timer."""
    logging.basicConfig(level=settings.log_level)

    notifier = EventNotifier()
    event_log = EventLog(maxlen=settings.event_log_size)
    notifier.subscribe(event_log)
    if settings.debug:
        notifier.subscribe(LoggingSubscriber())

    orchestrator = build_orchestrator(
        settings=settings,
        scheduler=AsyncioScheduler(asyncio.get_running_loop()),
        notifier=notifier,
    )
    app.state.orchestrator = orchestrator
    app.state.event_log = event_log

    regen_task = asyncio.create_task(
        regenerate_energy_forever(orchestrator, settings.energy_regen_seconds)
    )
    logger.info("Fortune engine ready: profile=%s", orchestrator.profile.name)
    try:
        yield
    finally:
        regen_task.cancel()
        try:
            await regen_task
        except asyncio.CancelledError:
            pass
        orchestrator.close()


app = FastAPI(
    title="Fortune Engine",
    version="0.1.0",
    description="Slot economy and outcome engine",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)


def get_orchestrator() -> SpinOrchestrator:
    return app.state.orchestrator


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/state")
async def state() -> dict:
    """Session phase, stake, toggles and the economy snapshot."""
    snapshot: SessionState = get_orchestrator().session_state()
    return snapshot.model_dump(mode="json")


@app.post("/spin")
async def spin(body: SpinRequest) -> dict:
    """
    Request a spin.

    A declined spin is a normal 200 response with accepted=false and the
    reason; the same SpinRejected event is in the event history.
    """
    orchestrator = get_orchestrator()
    session = orchestrator.request_spin(body.stake)
    if session is not None:
        return SpinResponse(accepted=True, round_id=session.round_id).model_dump(mode="json")

    return SpinResponse(accepted=False, reason=orchestrator.last_rejection).model_dump(mode="json")


@app.post("/auto-spin")
async def auto_spin(body: ToggleRequest) -> dict:
    orchestrator = get_orchestrator()
    orchestrator.set_auto_spin(body.enabled)
    return {"auto_spin": orchestrator.auto_spin}


@app.post("/turbo")
async def turbo(body: ToggleRequest) -> dict:
    orchestrator = get_orchestrator()
    orchestrator.set_turbo(body.enabled)
    return {"turbo": orchestrator.turbo}


@app.post("/stake")
async def stake(body: StakeAdjustRequest) -> dict:
    stake = get_orchestrator().adjust_stake(body.delta)
    return StakeResponse(stake=stake).model_dump()


@app.post("/theme")
async def theme(body: ThemeRequest) -> dict:
    selected = get_orchestrator().set_theme(body.theme_id)
    return {"theme": selected.id if selected else None}


@app.get("/events")
async def events(limit: int = Query(default=50, ge=0, le=1000)) -> dict:
    """Most recent events, oldest first."""
    event_log: EventLog = app.state.event_log
    return EventsResponse(events=event_log.recent(limit)).model_dump()
