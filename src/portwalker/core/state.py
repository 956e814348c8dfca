from .models import Phase

# Phase -> phases it may move to next. ABORTED is reachable from anywhere
# that is not already terminal.
_NEXT = {
    Phase.INIT:            {Phase.AWAITING_SECRET},
    Phase.AWAITING_SECRET: {Phase.HAVE_SECRET},
    Phase.HAVE_SECRET:     {Phase.AWAITING_LEVEL},
    Phase.AWAITING_LEVEL:  {Phase.HAVE_LEVEL},
    Phase.HAVE_LEVEL:      {Phase.INFORMATIONAL, Phase.SUBMITTING},
    Phase.INFORMATIONAL:   {Phase.INFORMATIONAL, Phase.SUBMITTING},
    Phase.SUBMITTING:      {Phase.DONE},
    Phase.DONE:            set(),
    Phase.ABORTED:         set(),
}

TERMINAL = frozenset({Phase.DONE, Phase.ABORTED})


class WalkState:
    """
    Deterministic finite-state machine for one port's endpoint walk.
    """

    def __init__(self) -> None:
        self.phase: Phase = Phase.INIT

    # ------------- public API -------------

    @property
    def terminal(self) -> bool:
        return self.phase in TERMINAL

    def advance(self, next_phase: Phase) -> Phase:
        if next_phase not in _NEXT[self.phase]:
            raise ValueError(f"cannot move from {self.phase.name} to {next_phase.name}")
        self.phase = next_phase
        return self.phase

    def abort(self) -> Phase:
        if self.terminal:
            raise ValueError(f"walk already finished ({self.phase.name})")
        self.phase = Phase.ABORTED
        return self.phase

