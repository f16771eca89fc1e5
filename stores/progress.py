"""Generation-progress model.

An ordered list of named phases plus the current phase id and an aggregate
0-100 value. All transitions are pure: each takes a GenerationProgress and
returns a new one. Aggregate progress only counts completed phases, so it
never decreases while phases move forward.
"""

from services.models import GenerationPhase, GenerationProgress, PhaseStatus

# Durations are cosmetic. They pace the progress display and say nothing
# about how long the real call takes.
DEFAULT_PHASES: list[GenerationPhase] = [
    GenerationPhase(
        id="competency",
        title="Extracting Core Competencies",
        description="Identifying the skills and requirements the role calls for",
        estimated_duration_seconds=8,
    ),
    GenerationPhase(
        id="company",
        title="Analyzing Company Signals",
        description="Reading culture, values and business priorities",
        estimated_duration_seconds=6,
    ),
    GenerationPhase(
        id="optimize",
        title="Rewriting & Optimizing Resume",
        description="Aligning experience with the target role",
        estimated_duration_seconds=15,
    ),
    GenerationPhase(
        id="review",
        title="Rapid Review Loop",
        description="Scoring the draft for alignment and clarity",
        estimated_duration_seconds=6,
    ),
    GenerationPhase(
        id="final",
        title="Generating Final Resume",
        description="Polishing and formatting the final document",
        estimated_duration_seconds=8,
    ),
    GenerationPhase(
        id="deliverables",
        title="Creating Deliverables",
        description="Writing the cover letter, highlights and interview toolkit",
        estimated_duration_seconds=12,
    ),
    GenerationPhase(
        id="proofread",
        title="Grammar & Readability Check",
        description="Checking grammar, tone and readability",
        estimated_duration_seconds=5,
    ),
]


def initial_progress(phases: list[GenerationPhase]) -> GenerationProgress:
    """All phases pending, no current phase, zero progress."""
    return GenerationProgress(
        phases=[p.model_copy(update={"status": PhaseStatus.PENDING}) for p in phases],
        phase=None,
        progress=0,
    )


def _with_status(
    progress: GenerationProgress, phase_id: str, status: PhaseStatus
) -> list[GenerationPhase]:
    return [
        p.model_copy(update={"status": status}) if p.id == phase_id else p.model_copy()
        for p in progress.phases
    ]


def _percent(phases: list[GenerationPhase]) -> int:
    if not phases:
        return 0
    completed = sum(1 for p in phases if p.status == PhaseStatus.COMPLETED)
    return int(completed * 100 / len(phases))


def active_phase(progress: GenerationProgress) -> GenerationPhase | None:
    for phase in progress.phases:
        if phase.status == PhaseStatus.ACTIVE:
            return phase
    return None


def activate_phase(progress: GenerationProgress, phase_id: str) -> GenerationProgress:
    """Make phase_id the active phase.

    Any other active phase is completed first, so at most one phase is
    ever active.
    """
    phases = [
        p.model_copy(update={"status": PhaseStatus.COMPLETED})
        if p.status == PhaseStatus.ACTIVE and p.id != phase_id
        else p.model_copy()
        for p in progress.phases
    ]
    phases = [
        p.model_copy(update={"status": PhaseStatus.ACTIVE}) if p.id == phase_id else p
        for p in phases
    ]
    return GenerationProgress(
        phases=phases,
        phase=phase_id,
        progress=max(progress.progress, _percent(phases)),
    )


def complete_phase(progress: GenerationProgress, phase_id: str) -> GenerationProgress:
    """Mark one phase completed."""
    phases = _with_status(progress, phase_id, PhaseStatus.COMPLETED)
    return GenerationProgress(
        phases=phases,
        phase=progress.phase,
        progress=max(progress.progress, _percent(phases)),
    )


def complete_all(progress: GenerationProgress) -> GenerationProgress:
    """Every phase completed, progress 100."""
    phases = [p.model_copy(update={"status": PhaseStatus.COMPLETED}) for p in progress.phases]
    last = phases[-1].id if phases else None
    return GenerationProgress(phases=phases, phase=last, progress=100)


def fail_phase(progress: GenerationProgress) -> GenerationProgress:
    """Mark the active phase as errored and end every phase still pending.

    If nothing is active the first pending phase takes the error and
    becomes the current phase. Completed phases are kept. Progress keeps its
    current value.
    """
    target = active_phase(progress)
    if target is None:
        target = next(
            (p for p in progress.phases if p.status == PhaseStatus.PENDING), None
        )
    if target is None:
        return progress.model_copy(deep=True)

    phases = [
        p.model_copy(update={"status": PhaseStatus.ERROR})
        if p.id == target.id or p.status == PhaseStatus.PENDING
        else p.model_copy()
        for p in progress.phases
    ]
    return GenerationProgress(phases=phases, phase=target.id, progress=progress.progress)
