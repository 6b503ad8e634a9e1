"""Operation phases and the legal transitions between them."""

from __future__ import annotations

import logging
from enum import StrEnum

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    CONFLICT_CHECKING = "conflict_checking"
    BUDGET_CHECKING = "budget_checking"
    INSTALLING_ITEMS = "installing_items"
    INSTALLING_LAYERS = "installing_layers"
    INSTALLING_PARAMETERS = "installing_parameters"
    INSTALLING_MENU = "installing_menu"
    DETECTING = "detecting"
    REMOVING_ITEMS = "removing_items"
    REMOVING_LAYERS = "removing_layers"
    REMOVING_PARAMETERS = "removing_parameters"
    REMOVING_MENU = "removing_menu"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


INSTALL_SEQUENCE: tuple[Phase, ...] = (
    Phase.IDLE,
    Phase.VALIDATING,
    Phase.CONFLICT_CHECKING,
    Phase.BUDGET_CHECKING,
    Phase.INSTALLING_ITEMS,
    Phase.INSTALLING_LAYERS,
    Phase.INSTALLING_PARAMETERS,
    Phase.INSTALLING_MENU,
    Phase.CLEANING_UP,
    Phase.DONE,
)

UNINSTALL_SEQUENCE: tuple[Phase, ...] = (
    Phase.IDLE,
    Phase.VALIDATING,
    Phase.DETECTING,
    Phase.REMOVING_ITEMS,
    Phase.REMOVING_LAYERS,
    Phase.REMOVING_PARAMETERS,
    Phase.REMOVING_MENU,
    Phase.CLEANING_UP,
    Phase.DONE,
)

TERMINAL_PHASES: frozenset[Phase] = frozenset({Phase.DONE, Phase.FAILED})


def _sequence_pairs(sequence: tuple[Phase, ...]) -> set[tuple[Phase, Phase]]:
    pairs = set(zip(sequence, sequence[1:]))
    # Any working phase may bail out to cleanup.
    for phase in sequence:
        if phase not in TERMINAL_PHASES and phase not in (Phase.IDLE, Phase.CLEANING_UP):
            pairs.add((phase, Phase.CLEANING_UP))
    pairs.add((Phase.CLEANING_UP, Phase.FAILED))
    return pairs


ALLOWED_TRANSITIONS: frozenset[tuple[Phase, Phase]] = frozenset(
    _sequence_pairs(INSTALL_SEQUENCE) | _sequence_pairs(UNINSTALL_SEQUENCE)
)


class PhaseTracker:
    """Walks an operation through its phases, rejecting illegal jumps.

    Phases that are skipped by options are still entered (and immediately
    left) so the observed history always follows the sequence.
    """

    def __init__(self) -> None:
        self.phase = Phase.IDLE
        self.history: list[Phase] = [Phase.IDLE]

    def advance(self, target: Phase) -> None:
        if (self.phase, target) not in ALLOWED_TRANSITIONS:
            raise RuntimeError(f"Illegal phase transition {self.phase} -> {target}")
        logger.debug("Phase %s -> %s", self.phase, target)
        self.phase = target
        self.history.append(target)

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES
