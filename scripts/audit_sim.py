#!/usr/bin/env python3
"""
Headless economy simulation.

Drives the real orchestrator with a seeded RNG and a virtual clock, so a
run is reproducible from (config_hash, profile, seed, rounds, stake).

Usage:
    python -m scripts.audit_sim --profile standard --rounds 5000 --seed AUDIT_2026 --out out/audit_standard.csv
    python -m scripts.audit_sim --profile premium --rounds 2000 --stake 200
"""
import argparse
import csv
import hashlib
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fortune.config import Settings, settings as default_settings
from fortune.config_hash import get_config_hash
from fortune.logic.catalog import get_profile
from fortune.logic.engine import build_orchestrator
from fortune.logic.rng import SeededRNG
from fortune.logic.timers import VirtualScheduler
from fortune.notifier import EventNotifier, GameEvent, LevelUpEvent, SpinSettledEvent
from fortune.protocol import WinTier


# Deep enough that no realistic run goes broke
SIMULATION_BANKROLL = 10**15


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    profile: str = "standard"
    stake: int = 0
    rounds: int = 0
    total_wagered: int = 0
    total_won: int = 0
    wins: int = 0
    big_wins: int = 0
    jackpots: int = 0
    legendary_hits: int = 0
    level_ups: int = 0
    final_level: int = 1
    max_payout: int = 0
    line_hits: dict[str, int] = field(default_factory=dict)

    @property
    def rtp(self) -> float:
        """Return to player, in percent of wagered currency."""
        return (self.total_won / self.total_wagered * 100) if self.total_wagered else 0.0

    @property
    def hit_frequency(self) -> float:
        return (self.wins / self.rounds * 100) if self.rounds else 0.0


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def run_simulation(
    rounds: int,
    seed_str: str,
    profile_name: str = "standard",
    stake: int | None = None,
    settings: Settings | None = None,
    verbose: bool = False,
) -> SimulationStats:
    """
    Run headless simulation.

    Energy is refilled between spins the way the host regeneration timer
    would, and the balance starts deep enough that every round is a real
    spin at `stake`.
    """
    settings = (settings or default_settings).model_copy(
        update={"starting_currency": SIMULATION_BANKROLL}
    )
    profile = get_profile(profile_name)
    scheduler = VirtualScheduler()
    notifier = EventNotifier()
    orchestrator = build_orchestrator(
        settings=settings,
        profile=profile,
        rng=SeededRNG(seed=seed_to_int(seed_str)),
        scheduler=scheduler,
        notifier=notifier,
    )
    stake = stake or orchestrator.stake
    stats = SimulationStats(profile=profile.name, stake=stake)

    def record(event: GameEvent) -> None:
        if isinstance(event, LevelUpEvent):
            stats.level_ups += 1
        elif isinstance(event, SpinSettledEvent):
            outcome = event.outcome
            stats.rounds += 1
            stats.total_wagered += outcome.stake
            stats.total_won += outcome.total_payout
            stats.max_payout = max(stats.max_payout, outcome.total_payout)
            if outcome.is_win:
                stats.wins += 1
            if outcome.win_tier == WinTier.BIG:
                stats.big_wins += 1
            if outcome.jackpot:
                stats.jackpots += 1
            if outcome.legendary_hit:
                stats.legendary_hits += 1
            for win in outcome.wins:
                stats.line_hits[win.line_id] = stats.line_hits.get(win.line_id, 0) + 1

    notifier.subscribe(record)
    economy = orchestrator.economy
    progress_interval = max(1, rounds // 100)

    for round_count in range(rounds):
        if verbose and round_count % progress_interval == 0:
            pct = (round_count / rounds) * 100
            print(f"\rProgress: {pct:.1f}%", end="", flush=True)

        if economy.state.energy < 1:
            economy.regenerate_energy(economy.state.max_energy)

        if orchestrator.request_spin(stake) is None:
            raise RuntimeError(f"Spin {round_count} was declined: {orchestrator.last_rejection}")
        scheduler.run_until_idle()

    if verbose:
        print("\rProgress: 100.0%")

    stats.final_level = economy.state.level
    return stats


def generate_csv(
    stats: SimulationStats,
    output_path: str,
    seed_str: str,
    settings: Settings | None = None,
) -> None:
    """Write a one-row summary CSV."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    row = {
        "config_hash": get_config_hash(settings),
        "timestamp": get_timestamp_iso(),
        "profile": stats.profile,
        "seed": seed_str,
        "rounds": stats.rounds,
        "stake": stats.stake,
        "total_wagered": stats.total_wagered,
        "total_won": stats.total_won,
        "rtp": f"{stats.rtp:.4f}",
        "hit_frequency": f"{stats.hit_frequency:.4f}",
        "big_wins": stats.big_wins,
        "jackpots": stats.jackpots,
        "legendary_hits": stats.legendary_hits,
        "level_ups": stats.level_ups,
        "final_level": stats.final_level,
        "max_payout": stats.max_payout,
    }
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row))
        writer.writeheader()
        writer.writerow(row)


def main() -> int:
    parser = argparse.ArgumentParser(description="Headless economy simulation")
    parser.add_argument("--profile", default=default_settings.profile)
    parser.add_argument("--rounds", type=int, default=5000)
    parser.add_argument("--seed", default="AUDIT_2026")
    parser.add_argument("--stake", type=int, default=None)
    parser.add_argument("--out", default=None, help="CSV output path")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    stats = run_simulation(
        rounds=args.rounds,
        seed_str=args.seed,
        profile_name=args.profile,
        stake=args.stake,
        verbose=args.verbose,
    )

    print(f"Profile:        {stats.profile}")
    print(f"Rounds:         {stats.rounds}")
    print(f"Stake:          {stats.stake}")
    print(f"RTP:            {stats.rtp:.2f}%")
    print(f"Hit frequency:  {stats.hit_frequency:.2f}%")
    print(f"Big wins:       {stats.big_wins}")
    print(f"Jackpots:       {stats.jackpots}")
    print(f"Level ups:      {stats.level_ups} (final level {stats.final_level})")
    print(f"Max payout:     {stats.max_payout}")

    if args.out:
        generate_csv(stats, args.out, args.seed)
        print(f"Wrote {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
