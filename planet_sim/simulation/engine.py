"""Turn engine: owns one game and runs the fixed per-turn pipeline."""

from __future__ import annotations

import copy
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Union

import numpy as np
from numpy.random import Generator

from planet_sim.core.errors import (
    ActionError,
    DecisionPendingError,
    GameOverError,
    InvalidActionError,
    InvalidStateError,
)
from planet_sim.core.state import (
    Cooldowns,
    GameState,
    default_start_state,
    state_from_dict,
    validate_state,
    with_log,
)
from planet_sim.economy.finance import EconomyReport, simulate_economy
from planet_sim.simulation import actions
from planet_sim.simulation.decisions import DecisionDefinition, DecisionSystem, apply_decision
from planet_sim.simulation.events import EventDefinition, EventSystem
from planet_sim.simulation.metrics import MetricsCollector
from planet_sim.simulation.victory import GameResult, evaluate
from planet_sim.social.society import SocietyReport, simulate_society
from planet_sim.viz.logger import GameLogger
from planet_sim.world.energy import EnergyReport, simulate_energy
from planet_sim.world.environment import EnvironmentReport, simulate_environment

CONTINUE = "continue"
DECISION_REQUIRED = "decision_required"
GAME_OVER = "game_over"


@dataclass(frozen=True)
class TurnReport:
    """What each stage of one turn produced."""

    turn: int
    energy: EnergyReport
    environment: EnvironmentReport
    economy: EconomyReport
    society: SocietyReport
    event: Optional[EventDefinition] = None


@dataclass(frozen=True)
class TurnOutcome:
    kind: str
    state: GameState
    report: Optional[TurnReport] = None
    decision: Optional[DecisionDefinition] = None
    result: Optional[GameResult] = None


@dataclass(frozen=True)
class _PendingTurn:
    start: GameState
    draft: GameState
    report: TurnReport
    decision: DecisionDefinition


class GameEngine:
    """Orchestrates one game of Planet 2500.

    Every engine owns its own state and random generator, so several games
    can run side by side.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[Generator] = None,
        logger: Optional[GameLogger] = None,
        event_bonus: float = 0.0,
    ) -> None:
        self.rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        self.event_bonus = event_bonus

        # Simulation systems
        self.event_system = EventSystem(self.rng)
        self.decision_system = DecisionSystem(self.rng)
        self.metrics = MetricsCollector()
        self.logger = logger if logger is not None else GameLogger(verbosity=0, stdout=False)

        self._state: GameState = default_start_state()
        self._pending: Optional[_PendingTurn] = None
        self._result: Optional[GameResult] = None

        self._log("Game started. Welcome to Planet 2500!")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def pending_decision(self) -> Optional[DecisionDefinition]:
        return self._pending.decision if self._pending else None

    @property
    def game_result(self) -> Optional[GameResult]:
        return self._result

    @property
    def is_running(self) -> bool:
        return self._result is None

    def get_state(self) -> GameState:
        """Snapshot of the current state; changing it never affects the engine."""
        return copy.deepcopy(self._state)

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    def load_state(self, state: Union[GameState, Mapping[str, Any]]) -> bool:
        """Adopt a previously saved state. Returns False if it is malformed."""
        try:
            if isinstance(state, GameState):
                validate_state(state)
                loaded = copy.deepcopy(state)
            else:
                loaded = state_from_dict(state)
        except InvalidStateError as e:
            self.logger.log(GameLogger.ERROR, f"Rejected saved state: {e}", turn=self._state.turn)
            return False

        self._state = loaded
        self._pending = None
        self._result = None
        self.logger.log(GameLogger.INFO, "Saved state loaded", turn=loaded.turn)
        return True

    def reset_state(self) -> None:
        self._state = default_start_state()
        self._pending = None
        self._result = None
        self.metrics = MetricsCollector()
        self._log("Game started. Welcome to Planet 2500!")

    # ------------------------------------------------------------------
    # Player API
    # ------------------------------------------------------------------

    def apply_action(self, action: str, batches: int = 1) -> bool:
        """Apply a player action now. Failures are logged and leave the state unchanged."""
        try:
            if self._result is not None:
                raise GameOverError("The game is over; no more actions are accepted")
            if self._pending is not None:
                raise DecisionPendingError(
                    f"Resolve the pending decision first: {self._pending.decision.title}"
                )
            result = actions.apply_action(self._state, action, batches)
        except ActionError as e:
            self._log(str(e), e.log_type)
            return False

        self._state = result.state
        if result.fossil_retired:
            self._log(f"Automatic transition: {result.fossil_retired} MW of fossil power retired")
        self._log(result.message, GameLogger.SUCCESS)
        self.metrics.record_action(action)
        return True

    def end_turn(self) -> TurnOutcome:
        """Run one full turn through the pipeline."""
        if self._result is not None:
            self._log("The game is over", GameLogger.WARNING)
            return TurnOutcome(kind=GAME_OVER, state=self.get_state(), result=self._result)
        if self._pending is not None:
            return TurnOutcome(
                kind=DECISION_REQUIRED,
                state=self.get_state(),
                report=self._pending.report,
                decision=self._pending.decision,
            )

        state = self._state

        # 1. ENERGY: production, consumption and storage from current capacity
        energy = simulate_energy(state)

        # 2. ENVIRONMENT: pollution and temperature from this turn's output
        environment = simulate_environment(state, energy.by_source)

        # 3. ECONOMY: income from current popularity, upkeep from current capacity
        economy = simulate_economy(state.popularity, state.energy.capacity, state.credits)

        # 4. SOCIETY: drift against this turn's environment, credits and energy
        draft = replace(
            state,
            credits=economy.credits,
            pollution=environment.pollution,
            temperature=environment.temperature,
            energy=replace(
                state.energy,
                production=energy.production,
                consumption=energy.consumption,
                storage=energy.storage,
            ),
            cleanup_active=False,
        )
        society = simulate_society(state.popularity, draft)
        draft = replace(draft, popularity=society.popularity)

        # 5. EVENT: at most one random event against the post-society state
        event_outcome = self.event_system.roll(draft, self.event_bonus)
        draft = event_outcome.state
        if event_outcome.event is not None:
            self.metrics.record_event(event_outcome.event.id)

        report = TurnReport(
            turn=state.turn,
            energy=energy,
            environment=environment,
            economy=economy,
            society=society,
            event=event_outcome.event,
        )

        # 6. DECISION: suspend before committing anything
        decision = self.decision_system.should_show(draft)
        if decision is not None:
            self._pending = _PendingTurn(start=state, draft=draft, report=report, decision=decision)
            self.logger.log(GameLogger.EVENT, f"Decision required: {decision.title}", turn=state.turn)
            return TurnOutcome(
                kind=DECISION_REQUIRED,
                state=self.get_state(),
                report=report,
                decision=decision,
            )

        # 7. COMMIT
        self._commit(draft, report)

        # 8. END CONDITIONS
        return self._finish_turn(report)

    def resolve_decision(self, choice: str) -> Optional[TurnOutcome]:
        """Answer the pending decision and complete the suspended turn.

        Returns None when no decision is pending.
        """
        if self._pending is None:
            return None

        pending = self._pending
        try:
            effects = pending.decision.effects_for(choice)
        except InvalidActionError as e:
            self._log(str(e), e.log_type)
            return None

        # Re-settle the economy stage: aid counts as income before the
        # zero floor, the direct credit delta lands after it.
        start = pending.start
        economy = simulate_economy(
            start.popularity,
            start.energy.capacity,
            start.credits,
            decision_credits=effects.credits,
            international_aid=effects.international_aid,
        )
        event_credits = pending.draft.credits - pending.report.economy.credits
        draft = replace(pending.draft, credits=max(0, economy.credits + event_credits))
        report = replace(pending.report, economy=economy)

        self._pending = None
        self._commit(draft, report)
        self._state = apply_decision(self._state, pending.decision, choice, credits_settled=True)

        verdict = "ACCEPTED" if choice == "accept" else "REJECTED"
        self._log(f'Decision "{pending.decision.title}" {verdict}')
        self.metrics.record_decision(pending.decision.id, choice)

        return self._finish_turn(report)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _log(self, message: str, type: str = GameLogger.INFO, turn: Optional[int] = None) -> None:
        """Record in the state's ring buffer and in the structured logger."""
        self._state = with_log(self._state, message, type)
        self.logger.log(type, message, turn=self._state.turn if turn is None else turn)

    def _commit(self, draft: GameState, report: TurnReport) -> None:
        self._state = replace(
            draft,
            turn=draft.turn + 1,
            cooldowns=Cooldowns(decision=max(0, draft.cooldowns.decision - 1)),
            logs=self._state.logs,
        )
        self._log_turn(report)

    def _log_turn(self, report: TurnReport) -> None:
        turn = report.turn
        self._log(f"Turn {turn} completed", turn=turn)

        if report.energy.balance < 0:
            self._log(f"Energy deficit: {abs(report.energy.balance)} MW", GameLogger.WARNING, turn)
        if report.environment.pollution_generated > 5:
            self._log(
                f"Pollution increase: {report.environment.pollution_generated:.1f}",
                GameLogger.WARNING,
                turn,
            )
        if report.economy.modifiers.modifier < 0:
            self._log(f"Fiscal pressure: {report.economy.modifiers.modifier} credits", GameLogger.WARNING, turn)
        if report.event is not None:
            self._log(report.event.log_message, GameLogger.EVENT, turn)

    def _finish_turn(self, report: TurnReport) -> TurnOutcome:
        result = evaluate(self._state)
        if result is not None:
            self._result = result
            self._log(
                f"Game over: {result.title}",
                GameLogger.SUCCESS if result.victory else GameLogger.ERROR,
                report.turn,
            )

        self.metrics.collect_turn(self._state, report)
        self.logger.flush_turn(report.turn)

        if result is not None:
            return TurnOutcome(kind=GAME_OVER, state=self.get_state(), report=report, result=result)
        return TurnOutcome(kind=CONTINUE, state=self.get_state(), report=report)
