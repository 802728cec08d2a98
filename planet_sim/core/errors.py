"""Exception hierarchy for the planet simulation."""

from __future__ import annotations


class PlanetSimError(Exception):
    """Base class for all simulation errors."""


class ActionError(PlanetSimError):
    """A player action could not be carried out."""

    log_type = "error"


class InsufficientResourcesError(ActionError):
    """Credits (or capacity) too low for the requested action."""

    log_type = "warning"


class InvalidActionError(ActionError):
    """Unknown action type or malformed parameters."""


class DecisionPendingError(ActionError):
    """The turn is suspended until the pending decision is resolved."""

    log_type = "warning"


class GameOverError(ActionError):
    """The game has ended; no further actions are accepted."""

    log_type = "warning"


class InvalidStateError(PlanetSimError, ValueError):
    """A state (usually loaded from disk) violates the model constraints."""
