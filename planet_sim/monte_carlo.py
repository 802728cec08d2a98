"""Monte Carlo analysis: play N games with the advisor under different seeds, aggregate statistics."""

from __future__ import annotations

import csv
import os
import statistics
import time
from dataclasses import dataclass

import numpy as np


@dataclass
class RunResult:
    """Summary of a single game."""
    seed: int
    outcome: str  # result type, or "unfinished"
    victory: bool
    turns_played: int
    score: int
    final_credits: int
    final_pollution: float
    final_temperature: float
    final_avg_popularity: float
    final_renewable_ratio: float
    final_balance: int
    peak_pollution: float
    min_credits: int
    events: int
    decisions: int
    actions: int
    elapsed_seconds: float


def play(engine, advisor, turns: int) -> None:
    """Let the advisor play until the game ends or `turns` turns are done."""
    from planet_sim.simulation.engine import DECISION_REQUIRED

    while engine.is_running and engine.state.turn <= turns:
        for planned in advisor.plan_turn(engine.state):
            engine.apply_action(planned.action, planned.batches)
        outcome = engine.end_turn()
        if outcome.kind == DECISION_REQUIRED:
            engine.resolve_decision(advisor.choose(outcome.decision, engine.state))


def run_single(seed: int, turns: int) -> RunResult:
    """Play one game and return its summary."""
    from planet_sim.agents.advisor import Advisor
    from planet_sim.simulation.engine import GameEngine

    engine = GameEngine(seed=seed)
    advisor = Advisor(np.random.default_rng(seed + 1))

    t0 = time.time()
    play(engine, advisor, turns)
    elapsed = time.time() - t0

    snaps = engine.metrics.snapshots
    last = snaps[-1] if snaps else None
    result = engine.game_result

    return RunResult(
        seed=seed,
        outcome=result.type if result else "unfinished",
        victory=bool(result and result.victory),
        turns_played=len(snaps),
        score=(result.score or 0) if result else 0,
        final_credits=last.credits if last else 0,
        final_pollution=last.pollution if last else 0,
        final_temperature=last.temperature if last else 0,
        final_avg_popularity=last.avg_popularity if last else 0,
        final_renewable_ratio=last.renewable_ratio if last else 0,
        final_balance=last.balance if last else 0,
        peak_pollution=max((s.pollution for s in snaps), default=0),
        min_credits=min((s.credits for s in snaps), default=0),
        events=sum(1 for s in snaps if s.event),
        decisions=sum(1 for s in snaps if s.decision),
        actions=sum(len(s.actions) for s in snaps),
        elapsed_seconds=elapsed,
    )


def stat_line(label: str, values: list[float], fmt: str = ".1f") -> str:
    if not values:
        return f"  {label}: no data"
    mn = min(values)
    mx = max(values)
    avg = statistics.mean(values)
    med = statistics.median(values)
    std = statistics.stdev(values) if len(values) > 1 else 0
    return f"  {label:<30s}  mean={avg:{fmt}}  median={med:{fmt}}  std={std:{fmt}}  min={mn:{fmt}}  max={mx:{fmt}}"


def monte_carlo(
    n_runs: int = 20,
    turns: int = 50,
    output_dir: str = "results/monte_carlo",
) -> list[RunResult]:
    """Play N games with seeded advisors and report aggregate stats."""

    os.makedirs(output_dir, exist_ok=True)
    results: list[RunResult] = []
    rng = np.random.default_rng(0)
    seeds = [int(s) for s in rng.integers(0, 100_000, size=n_runs)]

    print("=== Monte Carlo Simulation ===")
    print(f"Runs: {n_runs} | Turns/run: {turns}")
    print(f"Seeds: {seeds[:5]}{'...' if n_runs > 5 else ''}")
    print()

    total_t0 = time.time()

    for i, seed in enumerate(seeds):
        result = run_single(seed, turns)
        results.append(result)
        print(
            f"  Run {i+1:>3}/{n_runs} | seed={seed:>5} | "
            f"turns={result.turns_played:>3} | "
            f"credits={result.final_credits:>6} | "
            f"pollution={result.final_pollution:>5.1f} | "
            f"{result.outcome} | {result.elapsed_seconds:.2f}s"
        )

    total_elapsed = time.time() - total_t0
    if n_runs:
        print(f"\nAll {n_runs} runs completed in {total_elapsed:.1f}s "
              f"({total_elapsed/n_runs:.2f}s avg)")

    # ── Aggregate Statistics ──────────────────────────────────────────
    print("\n" + "=" * 70)
    print("AGGREGATE RESULTS")
    print("=" * 70)

    print("\nOUTCOMES")
    outcome_freq: dict[str, int] = {}
    for r in results:
        outcome_freq[r.outcome] = outcome_freq.get(r.outcome, 0) + 1
    for outcome, count in sorted(outcome_freq.items(), key=lambda x: -x[1]):
        print(f"  '{outcome}': {count}/{n_runs} runs ({count/n_runs*100:.0f}%)")
    wins = sum(1 for r in results if r.victory)
    if n_runs:
        print(f"  Victory rate: {wins}/{n_runs} ({wins/n_runs*100:.0f}%)")
    print(stat_line("Turns played", [r.turns_played for r in results]))
    print(stat_line("Victory score", [r.score for r in results if r.victory], ".0f"))

    print("\nENVIRONMENT")
    print(stat_line("Final pollution", [r.final_pollution for r in results]))
    print(stat_line("Peak pollution", [r.peak_pollution for r in results]))
    print(stat_line("Final temperature", [r.final_temperature for r in results]))

    print("\nENERGY")
    print(stat_line("Final renewable share (%)", [r.final_renewable_ratio * 100 for r in results]))
    print(stat_line("Final balance (MW)", [r.final_balance for r in results]))

    print("\nECONOMY AND SOCIETY")
    print(stat_line("Final credits", [r.final_credits for r in results], ".0f"))
    print(stat_line("Lowest credits", [r.min_credits for r in results], ".0f"))
    print(stat_line("Final avg popularity", [r.final_avg_popularity for r in results]))
    print(stat_line("Events", [r.events for r in results]))
    print(stat_line("Decisions", [r.decisions for r in results]))
    print(stat_line("Actions", [r.actions for r in results]))

    # ── Export CSV ────────────────────────────────────────────────────
    csv_path = os.path.join(output_dir, "monte_carlo_results.csv")
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "seed", "outcome", "victory", "turns", "score", "credits",
            "pollution", "temperature", "avg_popularity", "renewable_ratio",
            "balance", "peak_pollution", "min_credits", "events",
            "decisions", "actions", "elapsed_s",
        ])
        for r in results:
            writer.writerow([
                r.seed, r.outcome, int(r.victory), r.turns_played, r.score,
                r.final_credits, f"{r.final_pollution:.1f}",
                f"{r.final_temperature:.1f}", f"{r.final_avg_popularity:.1f}",
                f"{r.final_renewable_ratio:.3f}", r.final_balance,
                f"{r.peak_pollution:.1f}", r.min_credits, r.events,
                r.decisions, r.actions, f"{r.elapsed_seconds:.2f}",
            ])
    print(f"\nResults exported to {csv_path}")

    return results


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Monte Carlo Planet 2500 simulation")
    parser.add_argument("--runs", type=int, default=20, help="Number of runs")
    parser.add_argument("--turns", type=int, default=50, help="Maximum turns per run")
    parser.add_argument("--output-dir", type=str, default="results/monte_carlo")
    args = parser.parse_args()

    monte_carlo(
        n_runs=args.runs,
        turns=args.turns,
        output_dir=args.output_dir,
    )


if __name__ == "__main__":
    main()
