"""Entry point for the Planet 2500 energy-transition game."""

from __future__ import annotations

import argparse
import os
import time


def _print_status(engine) -> None:
    from planet_sim.core.state import average_popularity
    from planet_sim.world.energy import renewable_ratio

    s = engine.state
    cap = s.energy.capacity
    print(
        f"Turn {s.turn} | Credits {s.credits} | Pollution {s.pollution:.1f} | "
        f"Temperature {s.temperature:.1f}C"
    )
    print(
        f"  Popularity poor {s.popularity.poor} / middle {s.popularity.middle} / "
        f"rich {s.popularity.rich} (avg {average_popularity(s.popularity):.1f})"
    )
    print(
        f"  Energy {s.energy.production}/{s.energy.consumption} MW | Storage "
        f"{s.energy.storage}/{s.energy.max_storage} MW | Renewable {renewable_ratio(cap):.0%}"
    )
    print(
        f"  Capacity solar {cap.solar}, wind {cap.wind}, hydro {cap.hydro}, "
        f"geo {cap.geo}, fossil {cap.fossil}"
    )


def _print_decision(decision) -> None:
    print()
    print(f"*** DECISION: {decision.title} ***")
    print(f"  {decision.description}")
    print(f"  accept: {', '.join(decision.accept.describe()) or 'no effect'}")
    print(f"  reject: {', '.join(decision.reject.describe()) or 'no effect'}")


def _ask_decision(engine, decision):
    _print_decision(decision)
    while True:
        choice = input("accept / reject > ").strip().lower()
        if choice in ("accept", "reject", "a", "r"):
            choice = "accept" if choice.startswith("a") else "reject"
            return engine.resolve_decision(choice)
        print("Please answer 'accept' or 'reject'.")


def _run_interactive(engine, max_turns: int) -> None:
    from planet_sim.simulation.actions import action_cost, action_name, available_actions
    from planet_sim.simulation.engine import DECISION_REQUIRED

    print("Commands: <action> [batches] | end | status | actions | quit")
    while engine.is_running and engine.state.turn <= max_turns:
        try:
            line = input(f"[turn {engine.state.turn}] > ").strip()
        except EOFError:
            break
        if not line:
            continue
        parts = line.split()
        cmd = parts[0].lower()

        if cmd in ("quit", "exit", "q"):
            break
        if cmd == "status":
            _print_status(engine)
            continue
        if cmd == "actions":
            for a in available_actions():
                print(f"  {a:<22} {action_name(a):<26} {action_cost(a):>4} credits")
            continue
        if cmd == "end":
            outcome = engine.end_turn()
            if outcome.kind == DECISION_REQUIRED:
                outcome = _ask_decision(engine, outcome.decision)
            _print_status(engine)
            if outcome is not None and outcome.report is not None and outcome.report.event is not None:
                print(f"  Event: {outcome.report.event.name}. {outcome.report.event.description}")
            continue

        batches = 1
        if len(parts) > 1:
            try:
                batches = int(parts[1])
            except ValueError:
                print(f"Invalid batch count: {parts[1]}")
                continue
        ok = engine.apply_action(cmd, batches)
        print(engine.state.logs[-1].message if engine.state.logs else ("ok" if ok else "failed"))


def _run_auto(engine, max_turns: int, seed: int) -> None:
    import numpy as np

    from planet_sim.agents.advisor import Advisor
    from planet_sim.simulation.engine import DECISION_REQUIRED

    advisor = Advisor(np.random.default_rng(seed + 1))
    milestone = max(1, max_turns // 10)

    while engine.is_running and engine.state.turn <= max_turns:
        for planned in advisor.plan_turn(engine.state):
            engine.apply_action(planned.action, planned.batches)

        outcome = engine.end_turn()
        if outcome.kind == DECISION_REQUIRED:
            outcome = engine.resolve_decision(advisor.choose(outcome.decision, engine.state))

        turn = engine.state.turn - 1
        if turn % milestone == 0:
            s = engine.state
            print(
                f"  Turn {turn:>3}  |  credits {s.credits:>6}  |  pollution {s.pollution:5.1f}  |  "
                f"temp {s.temperature:4.1f}  |  energy {s.energy.production}/{s.energy.consumption}"
            )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Planet 2500 - Energy Transition Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--turns", type=int, default=50, help="Maximum number of turns to play")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument("--verbosity", type=int, default=1, choices=[0, 1, 2], help="Log verbosity level")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory for results")
    parser.add_argument("--log-file", type=str, default=None, help="Path to log file")
    parser.add_argument("--auto", action="store_true", help="Let the heuristic advisor play")
    parser.add_argument("--load", type=str, default=None, help="Resume from a save file")
    parser.add_argument("--save", type=str, default=None, help="Write a save file when the session ends")
    parser.add_argument("--no-plots", action="store_true", help="Skip the matplotlib reports")

    args = parser.parse_args()

    # Import here to allow --help without loading everything
    from planet_sim.core.storage import load_game, save_game
    from planet_sim.simulation.engine import GameEngine
    from planet_sim.simulation.victory import final_message, final_statistics
    from planet_sim.viz.logger import GameLogger

    print("=== Planet 2500 ===")
    print(f"Turns: {args.turns} | Seed: {args.seed} | Mode: {'auto' if args.auto else 'interactive'}")
    print(f"Output: {args.output_dir}")
    print()

    logger = GameLogger(
        verbosity=args.verbosity,
        log_file=args.log_file or os.path.join(args.output_dir, "game.log"),
        stdout=(args.verbosity > 0 and not args.auto),
    )
    engine = GameEngine(seed=args.seed, logger=logger)

    if args.load:
        saved = load_game(args.load)
        if saved is None or not engine.load_state(saved):
            print(f"Could not load {args.load}, starting a new game")
        else:
            print(f"Resumed from {args.load} at turn {engine.state.turn}")

    _print_status(engine)
    print()

    t0 = time.time()
    try:
        if args.auto:
            _run_auto(engine, args.turns, args.seed)
        else:
            _run_interactive(engine, args.turns)
    except KeyboardInterrupt:
        print("\nGame interrupted by user")
    elapsed = time.time() - t0

    print()
    result = engine.game_result
    if result is not None:
        stats = final_statistics(engine.state, result.victory)
        print(f"=== {result.title} ===")
        print(result.message)
        if result.score is not None:
            print(f"Score: {result.score}/100")
        print(final_message(result, stats))
        print(
            f"Ecology: {stats.ecology_rating} | Society: {stats.society_rating} | "
            f"Economy: {stats.economy_rating}"
        )
    else:
        print(f"Session ended at turn {engine.state.turn} after {elapsed:.1f}s")

    # Export results
    os.makedirs(args.output_dir, exist_ok=True)

    csv_path = os.path.join(args.output_dir, "metrics.csv")
    engine.metrics.export_csv(csv_path)
    print(f"Metrics exported to {csv_path}")

    if not args.no_plots:
        from planet_sim.viz.dashboard import comprehensive_report
        comprehensive_report(engine.metrics, args.output_dir)

    print()
    print(engine.metrics.summary_report())

    if args.save:
        save_game(engine.get_state(), args.save)
        print(f"Game saved to {args.save}")

    engine.logger.export_json(os.path.join(args.output_dir, "events.json"))
    engine.logger.close()

    print(f"\nAll results saved to {args.output_dir}/")


if __name__ == "__main__":
    main()
