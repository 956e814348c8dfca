from __future__ import annotations

import pytest

from portwalker.core.models import Phase
from portwalker.core.state import WalkState


def test_happy_path_transitions() -> None:
    state = WalkState()
    for phase in (
        Phase.AWAITING_SECRET,
        Phase.HAVE_SECRET,
        Phase.AWAITING_LEVEL,
        Phase.HAVE_LEVEL,
        Phase.INFORMATIONAL,
        Phase.INFORMATIONAL,
        Phase.SUBMITTING,
        Phase.DONE,
    ):
        assert state.advance(phase) is phase
    assert state.terminal


def test_level_before_secret_is_rejected() -> None:
    state = WalkState()
    with pytest.raises(ValueError):
        state.advance(Phase.AWAITING_LEVEL)


def test_abort() -> None:
    state = WalkState()
    state.advance(Phase.AWAITING_SECRET)
    assert state.abort() is Phase.ABORTED
    assert state.terminal
    with pytest.raises(ValueError):
        state.abort()
    with pytest.raises(ValueError):
        state.advance(Phase.HAVE_SECRET)
