"""Domain models: catalog entries, grid results and economy state."""
import uuid
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from fortune.protocol import WinTier


class Rarity(str, Enum):
    """Rarity tier controlling draw probability and base multiplier."""

    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Symbol(BaseModel):
    """Immutable catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    rarity: Rarity
    base_multiplier: Decimal = Field(gt=0)
    themes: frozenset[str] = frozenset()


class Theme(BaseModel):
    """
    Themed machine skin with economic effect.

    Members are the catalog symbols listing the theme id in Symbol.themes.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unlock_level: int = Field(default=1, ge=1)
    multiplier: Decimal = Field(default=Decimal(1), gt=0)


class Line(BaseModel):
    """Named, ordered set of (column, row) cells checked for a matching run."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    cells: tuple[tuple[int, int], ...]
    payout_weight: Decimal = Field(default=Decimal(1), gt=0)


# grid[column][row]
Grid = list[list[Symbol]]


class WinResult(BaseModel):
    """One matched line. Payout fields are filled in by the composer."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    line_id: str
    payout_weight: Decimal
    raw_payout: Decimal = Decimal(0)
    payout: int = 0


class SpinOutcome(BaseModel):
    """Aggregate result of one spin."""

    model_config = ConfigDict(frozen=True)

    stake: int
    wins: list[WinResult] = Field(default_factory=list)
    total_payout: int = 0
    experience_gained: int = 0
    multiplier: Decimal = Decimal(1)
    win_tier: WinTier = WinTier.NONE
    jackpot: bool = False
    legendary_hit: bool = False
    streak_delta: int = 0

    @property
    def is_win(self) -> bool:
        return bool(self.wins)


class EconomyState(BaseModel):
    """
    The single mutable economy root.

    Only the Economy state machine mutates it. Tracks:
    - currency (never negative)
    - energy (0..max_energy)
    - level / experience progression
    - win streak and lifetime counters
    """

    currency: int = 0
    energy: int = 0
    max_energy: int = 10
    level: int = 1
    experience: int = 0
    win_streak: int = 0
    total_spins: int = 0
    total_currency_earned: int = 0


class SpinSession(BaseModel):
    """Transient state of the in-flight spin, owned by the orchestrator."""

    round_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    stake: int
    turbo: bool = False
    auto: bool = False
    theme_id: str | None = None
    started_at: float = 0.0
    settle_at: float = 0.0
    grid: Grid = Field(default_factory=list)
