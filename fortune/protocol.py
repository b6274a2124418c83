"""External interface models: enums, economy snapshot, host request/response bodies."""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# === Enums ===


class SpinPhase(str, Enum):
    """Lifecycle phase of the spin session."""

    IDLE = "idle"
    VALIDATING = "validating"
    SPINNING = "spinning"
    RESOLVING = "resolving"
    SETTLED = "settled"


class RejectReason(str, Enum):
    """Why a spin request was declined (also why auto-spin stopped)."""

    INSUFFICIENT_ENERGY = "insufficient_energy"
    INSUFFICIENT_CURRENCY = "insufficient_currency"
    SPIN_IN_PROGRESS = "spin_in_progress"


class WinTier(str, Enum):
    """Payout classification used for effect intensity."""

    NONE = "none"
    WIN = "win"
    BIG = "big"
    JACKPOT = "jackpot"


class EventKind(str, Enum):
    """Event kinds broadcast by the notifier."""

    SPIN_STARTED = "spin_started"
    SPIN_SETTLED = "spin_settled"
    LEVEL_UP = "level_up"
    AUTO_SPIN_STOPPED = "auto_spin_stopped"
    SPIN_REJECTED = "spin_rejected"


# === Read-only state ===


class EconomySnapshot(BaseModel):
    """Read-only copy of the economy state for collaborators."""

    model_config = ConfigDict(frozen=True)

    currency: int
    energy: int
    max_energy: int
    level: int
    experience: int
    experience_to_next_level: int
    win_streak: int
    total_spins: int
    total_currency_earned: int


class SessionState(BaseModel):
    """GET /state response."""

    phase: SpinPhase
    stake: int
    auto_spin: bool
    turbo: bool
    theme: str | None = None
    config_hash: str
    economy: EconomySnapshot
    reels_stopped: list[bool]
    progress: float


# === Request Models ===


class SpinRequest(BaseModel):
    """POST /spin request body; stake defaults to the session stake."""

    stake: int | None = Field(default=None, description="Currency wagered on this spin")


class ToggleRequest(BaseModel):
    """POST /auto-spin and POST /turbo request body."""

    enabled: bool


class StakeAdjustRequest(BaseModel):
    """POST /stake request body."""

    delta: int = Field(..., description="Signed multiple of the stake step")


class ThemeRequest(BaseModel):
    """POST /theme request body; null clears the theme."""

    theme_id: str | None = None


# === Response Models ===


class SpinResponse(BaseModel):
    """POST /spin response."""

    accepted: bool
    round_id: str | None = None
    reason: RejectReason | None = None


class StakeResponse(BaseModel):
    """POST /stake response."""

    stake: int


class EventsResponse(BaseModel):
    """GET /events response."""

    events: list[dict[str, Any]] = Field(default_factory=list)
