"""Machine profiles: symbol catalog, line set and rarity weights.

The classic, premium and standard machines differ only in these tables,
so each is a MachineProfile fed to the same engine.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from fortune.errors import ConfigurationError
from fortune.logic.models import Line, Rarity, Symbol, Theme


# Grid dimensions
COLUMNS = 3
ROWS = 3

# Primary vs secondary line weights
PRIMARY_WEIGHT = Decimal("1.0")
SECONDARY_WEIGHT = Decimal("0.6")
CLASSIC_SECONDARY_WEIGHT = Decimal("0.5")

# Draw order for cumulative rarity bands, rarest first
RARITY_DRAW_ORDER = (Rarity.LEGENDARY, Rarity.EPIC, Rarity.RARE, Rarity.COMMON)

WEIGHT_TOLERANCE = Decimal("0.000001")


@dataclass(frozen=True)
class MachineProfile:
    """
    Everything that distinguishes one machine variant from another.

    Validated on construction; an invalid profile never reaches a spin.
    """

    name: str
    symbols: tuple[Symbol, ...]
    lines: tuple[Line, ...]
    rarity_weights: dict[Rarity, Decimal]
    themes: tuple[Theme, ...] = ()
    columns: int = COLUMNS
    rows: int = ROWS
    _by_rarity: dict[Rarity, tuple[Symbol, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.symbols:
            raise ConfigurationError(f"Profile {self.name!r} has an empty symbol catalog.")
        if not self.lines:
            raise ConfigurationError(f"Profile {self.name!r} has no lines.")

        ids = [s.id for s in self.symbols]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Profile {self.name!r} has duplicate symbol ids.")

        for line in self.lines:
            if len(line.cells) < 2:
                raise ConfigurationError(f"Line {line.id!r} needs at least two cells.")
            for column, row in line.cells:
                if not (0 <= column < self.columns and 0 <= row < self.rows):
                    raise ConfigurationError(
                        f"Line {line.id!r} cell ({column}, {row}) is outside "
                        f"the {self.columns}x{self.rows} grid."
                    )

        weights = {rarity: Decimal(self.rarity_weights.get(rarity, 0)) for rarity in Rarity}
        if any(w < 0 for w in weights.values()):
            raise ConfigurationError(f"Profile {self.name!r} has a negative rarity weight.")
        if abs(sum(weights.values()) - 1) > WEIGHT_TOLERANCE:
            raise ConfigurationError(
                f"Profile {self.name!r} rarity weights sum to {sum(weights.values())}, expected 1."
            )
        object.__setattr__(self, "rarity_weights", weights)

        by_rarity = {
            rarity: tuple(s for s in self.symbols if s.rarity == rarity) for rarity in Rarity
        }
        object.__setattr__(self, "_by_rarity", by_rarity)

    def symbols_of(self, rarity: Rarity) -> tuple[Symbol, ...]:
        """Catalog symbols of the given rarity."""
        return self._by_rarity[rarity]

    def get_theme(self, theme_id: str) -> Theme | None:
        for theme in self.themes:
            if theme.id == theme_id:
                return theme
        return None


def _rows_and_columns(secondary: Decimal) -> tuple[Line, ...]:
    """Three rows, three columns and both diagonals; middle row is primary."""
    return (
        Line(id="middle", name="Middle row", cells=((0, 1), (1, 1), (2, 1)), payout_weight=PRIMARY_WEIGHT),
        Line(id="top", name="Top row", cells=((0, 0), (1, 0), (2, 0)), payout_weight=secondary),
        Line(id="bottom", name="Bottom row", cells=((0, 2), (1, 2), (2, 2)), payout_weight=secondary),
        Line(id="left", name="Left column", cells=((0, 0), (0, 1), (0, 2)), payout_weight=secondary),
        Line(id="center", name="Center column", cells=((1, 0), (1, 1), (1, 2)), payout_weight=secondary),
        Line(id="right", name="Right column", cells=((2, 0), (2, 1), (2, 2)), payout_weight=secondary),
        Line(id="diagonal_down", name="Diagonal ↘", cells=((0, 0), (1, 1), (2, 2)), payout_weight=secondary),
        Line(id="diagonal_up", name="Diagonal ↗", cells=((0, 2), (1, 1), (2, 0)), payout_weight=secondary),
    )


def _three_rows(secondary: Decimal) -> tuple[Line, ...]:
    return _rows_and_columns(secondary)[:3]


# Theme ladder, unlocked by player level
THEMES = (
    Theme(id="classic", name="Classic Gold", unlock_level=1),
    Theme(id="phoenix", name="Imperial Phoenix", unlock_level=5),
    Theme(id="panda", name="Zen Panda", unlock_level=10),
    Theme(id="dragon", name="Celestial Dragon", unlock_level=15),
    Theme(id="jade", name="Mystic Jade", unlock_level=20),
    Theme(id="celestial", name="Celestial Supreme", unlock_level=30),
)

# Symbols owned by each theme, in payout tier order
THEME_SYMBOLS: dict[str, tuple[tuple[str, str], ...]] = {
    "classic": (
        ("tiger", "Golden Tiger"),
        ("fox", "Lucky Fox"),
        ("frog", "Prosperity Frog"),
        ("envelope", "Red Envelope"),
        ("orange", "Fortune Orange"),
        ("scroll", "Mystic Scroll"),
    ),
    "phoenix": (
        ("crown", "Imperial Crown"),
        ("diamond", "Phoenix Diamond"),
        ("flame", "Sacred Flame"),
        ("radiant_star", "Radiant Star"),
        ("star", "Golden Star"),
        ("dove", "White Dove"),
    ),
    "panda": (
        ("panda", "Giant Panda"),
        ("meditation", "Meditation"),
        ("bamboo", "Bamboo"),
        ("blossom", "Cherry Blossom"),
        ("leaf", "Spring Leaf"),
        ("herb", "Mountain Herb"),
    ),
    "dragon": (
        ("dragon", "Celestial Dragon"),
        ("crystal_ball", "Crystal Ball"),
        ("lightning", "Lightning"),
        ("moon", "Crescent Moon"),
        ("wave", "Ocean Wave"),
        ("cloud", "Storm Cloud"),
    ),
    "jade": (
        ("jade_heart", "Jade Heart"),
        ("pagoda", "Pagoda"),
        ("lotus", "Lotus"),
        ("mask", "Opera Mask"),
        ("hibiscus", "Hibiscus"),
        ("om", "Om"),
    ),
    "celestial": (
        ("galaxy", "Galaxy"),
        ("hexagram", "Hexagram"),
        ("planet", "Ringed Planet"),
        ("nova", "Nova"),
        ("comet", "Comet"),
        ("sparkles", "Sparkles"),
    ),
}


def _themed_symbols(tiers: tuple[tuple[Rarity, str], ...]) -> tuple[Symbol, ...]:
    """Catalog of every theme's symbols; the n-th symbol of a theme pays tier n."""
    return tuple(
        Symbol(
            id=symbol_id,
            name=name,
            rarity=rarity,
            base_multiplier=Decimal(multiplier),
            themes=frozenset({theme_id}),
        )
        for theme_id, members in THEME_SYMBOLS.items()
        for (symbol_id, name), (rarity, multiplier) in zip(members, tiers, strict=True)
    )


STANDARD_PROFILE = MachineProfile(
    name="standard",
    symbols=_themed_symbols((
        (Rarity.LEGENDARY, "50"),
        (Rarity.EPIC, "25"),
        (Rarity.RARE, "15"),
        (Rarity.RARE, "10"),
        (Rarity.COMMON, "5"),
        (Rarity.COMMON, "3"),
    )),
    lines=_rows_and_columns(SECONDARY_WEIGHT),
    rarity_weights={
        Rarity.COMMON: Decimal("0.60"),
        Rarity.RARE: Decimal("0.28"),
        Rarity.EPIC: Decimal("0.08"),
        Rarity.LEGENDARY: Decimal("0.04"),
    },
    themes=THEMES,
)

CLASSIC_PROFILE = MachineProfile(
    name="classic",
    symbols=_themed_symbols((
        (Rarity.LEGENDARY, "15"),
        (Rarity.RARE, "8"),
        (Rarity.RARE, "6"),
        (Rarity.COMMON, "5"),
        (Rarity.COMMON, "4"),
        (Rarity.RARE, "7"),
    )),
    lines=_three_rows(CLASSIC_SECONDARY_WEIGHT),
    rarity_weights={
        Rarity.COMMON: Decimal("0.60"),
        Rarity.RARE: Decimal("0.30"),
        Rarity.LEGENDARY: Decimal("0.10"),
    },
    themes=THEMES,
)

PREMIUM_PROFILE = MachineProfile(
    name="premium",
    symbols=_themed_symbols((
        (Rarity.LEGENDARY, "50"),
        (Rarity.RARE, "20"),
        (Rarity.RARE, "15"),
        (Rarity.RARE, "12"),
        (Rarity.COMMON, "8"),
        (Rarity.RARE, "25"),
    )),
    lines=_three_rows(SECONDARY_WEIGHT),
    rarity_weights={
        Rarity.COMMON: Decimal("0.55"),
        Rarity.RARE: Decimal("0.35"),
        Rarity.LEGENDARY: Decimal("0.10"),
    },
    themes=THEMES,
)


PROFILES: dict[str, MachineProfile] = {
    profile.name: profile
    for profile in (STANDARD_PROFILE, CLASSIC_PROFILE, PREMIUM_PROFILE)
}


def get_profile(name: str) -> MachineProfile:
    """Look up a built-in profile, failing fast on unknown names."""
    try:
        return PROFILES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown machine profile {name!r}. Available: {sorted(PROFILES)}"
        ) from None
