# src/rehabcoach/analysis/rep_counter.py

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Sequence

from ..config import MSG_BAD_REP, MSG_GOOD_REP
from ..data_models import CountingState, RepQuality


def hysteresis_step(current: CountingState, enters_active: bool, back_at_rest: bool) -> CountingState:
    """
    Next phase given the two threshold tests.

    The tests use different cutoffs, so a reading sitting between them
    keeps whatever phase it is already in. INIT only ever resolves to the
    rest phase; a rep cannot start before the user has been seen at rest.
    """
    if current == CountingState.INIT:
        return CountingState.UP if back_at_rest else CountingState.INIT
    if current == CountingState.UP:
        return CountingState.DOWN if enters_active else CountingState.UP
    return CountingState.UP if back_at_rest else CountingState.DOWN


@dataclass(frozen=True)
class RepState:
    counting_state: CountingState = CountingState.INIT
    reps: int = 0
    current_rep_errors: FrozenSet[str] = frozenset()
    current_rep_peak: float = 0.0
    last_rep_quality: Optional[RepQuality] = None


@dataclass(frozen=True)
class CompletedRep:
    index: int
    peak_depth: float
    quality: RepQuality
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RepOutcome:
    state: RepState
    feedback: List[str]
    completed: Optional[CompletedRep] = None


def advance_rep(
    state: RepState,
    target: CountingState,
    form_feedback: Sequence[str],
    depth: float,
) -> RepOutcome:
    """
    Apply one accepted frame to the rep cycle.

    Order: this frame's feedback is folded into the in-progress rep if the
    previous phase was DOWN, then the transition to `target` is applied.
    Entering DOWN starts a fresh error set seeded with this frame; leaving
    DOWN counts the rep and grades it on the accumulated set. The one-shot
    verdict message goes into the returned feedback only.
    """
    prev = state.counting_state
    if prev == CountingState.INIT and target == CountingState.DOWN:
        target = CountingState.INIT

    errors = state.current_rep_errors
    peak = state.current_rep_peak
    if prev == CountingState.DOWN:
        errors = errors | frozenset(form_feedback)
        peak = max(peak, depth)

    feedback = list(form_feedback)

    if prev != CountingState.DOWN and target == CountingState.DOWN:
        new_state = replace(
            state,
            counting_state=target,
            current_rep_errors=frozenset(form_feedback),
            current_rep_peak=depth,
        )
        return RepOutcome(state=new_state, feedback=feedback)

    if prev == CountingState.DOWN and target == CountingState.UP:
        quality = RepQuality.GOOD if not errors else RepQuality.BAD
        reps = state.reps + 1
        feedback.append(MSG_GOOD_REP if quality == RepQuality.GOOD else MSG_BAD_REP)
        completed = CompletedRep(index=reps, peak_depth=peak, quality=quality, errors=sorted(errors))
        new_state = replace(
            state,
            counting_state=target,
            reps=reps,
            current_rep_errors=errors,
            current_rep_peak=peak,
            last_rep_quality=quality,
        )
        return RepOutcome(state=new_state, feedback=feedback, completed=completed)

    new_state = replace(state, counting_state=target, current_rep_errors=errors, current_rep_peak=peak)
    return RepOutcome(state=new_state, feedback=feedback)
