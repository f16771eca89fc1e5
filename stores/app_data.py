"""App-data store: inputs, outputs, status and generation progress.

The store runs one generation at a time as two independent timelines:

* a cosmetic one that walks the phase list on fixed durations, holding the
  last phase active until the real call resolves, and
* the real generation call, injected as an opaque callable.

They are reconciled only when the real call succeeds or fails. Callers are
expected to check `status.loading` before starting another run and to claim
the run with begin_generation() before yielding to the event loop; the store
does not lock. Inputs and outputs are persisted under "app-data-storage".
"""

import asyncio
import contextlib
import inspect
import logging
import re
from datetime import datetime
from typing import Any, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from flow_router import first_incomplete_step
from local_storage import LocalStorage
from services.exceptions import GenerationFailedError, ResumeBuilderError
from services.models import (
    AppDataState,
    FlowStep,
    GenerationPhase,
    GenerationProgress,
    Inputs,
    Outputs,
    OutputVariants,
    ResumeGenerationParams,
    ResumeGenerationResult,
    Settings,
    Status,
    ToolkitRecord,
)

from .base import Store, merge_partial
from .progress import (
    DEFAULT_PHASES,
    activate_phase,
    complete_all,
    complete_phase,
    fail_phase,
    initial_progress,
)
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)

APP_DATA_STORAGE_KEY = "app-data-storage"

MIN_INPUT_CHARS = 50

GenerateFn = Callable[[ResumeGenerationParams], Any | Awaitable[Any]]

_WORD_RE = re.compile(r"\S+")


# =============================================================================
# Selectors
# =============================================================================


def select_generated_resume(state: AppDataState) -> str:
    """Pick the current résumé text from the canonical field or its aliases.

    First non-empty wins: resume, targeted_resume, latest, variants.targeted.
    """
    return state.outputs.current_resume()


def get_word_count(text: str | None) -> int:
    return len(_WORD_RE.findall(text or ""))


def is_over_limit(text: str | None, limit: int) -> bool:
    return get_word_count(text) > limit


def outputs_from_result(result: ResumeGenerationResult) -> Outputs:
    """Build outputs from a generation result, mirroring legacy aliases."""
    resume = result.final_resume
    metadata = result.metadata.model_copy(deep=True)
    if result.grammar_score is not None:
        metadata.grammar_score = result.grammar_score
    return Outputs(
        resume=resume,
        cover_letter=result.cover_letter or None,
        highlights=list(result.recruiter_highlights),
        toolkit=result.interview_toolkit,
        weekly_kpi_tracker=result.weekly_kpi_tracker or None,
        metadata=metadata,
        latest=resume,
        targeted_resume=resume,
        variants=OutputVariants(targeted=resume),
    )


def _coerce_result(raw: Any) -> ResumeGenerationResult:
    if isinstance(raw, ResumeGenerationResult):
        return raw
    if isinstance(raw, str):
        return ResumeGenerationResult(final_resume=raw)
    return ResumeGenerationResult.model_validate(raw)


# =============================================================================
# Store
# =============================================================================


class AppDataStore(Store[AppDataState]):
    """Orchestrates the wizard's data and the generation run."""

    def __init__(
        self,
        storage: LocalStorage,
        generator: GenerateFn,
        settings_store: SettingsStore | None = None,
        phases: list[GenerationPhase] | None = None,
        time_scale: float = 1.0,
        clock: Callable[[], datetime] | None = None,
        min_input_chars: int = MIN_INPUT_CHARS,
    ):
        """Initialize the store.

        Args:
            storage: LocalStorage holding the persisted inputs and outputs.
            generator: The generation call. Plain callables run in a worker
                thread; coroutine functions are awaited.
            settings_store: Source of the generation settings. A new one on
                the same storage if None.
            phases: Progress phases. DEFAULT_PHASES if None.
            time_scale: Multiplier on the cosmetic phase durations.
            clock: Returns "now". datetime.now if None.
            min_input_chars: Minimum trimmed length of both inputs.
        """
        self.storage = storage
        self._generator = generator
        self.settings_store = settings_store or SettingsStore(storage)
        self._phases = list(phases or DEFAULT_PHASES)
        self.time_scale = time_scale
        self._clock = clock or datetime.now
        self.min_input_chars = min_input_chars
        self._generation_token = 0

        inputs, outputs = self._rehydrate()
        super().__init__(
            AppDataState(
                settings=self.settings_store.settings,
                inputs=inputs,
                outputs=outputs,
                generation_progress=initial_progress(self._phases),
            )
        )
        self.settings_store.subscribe(self._on_settings_changed)

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def settings(self) -> Settings:
        return self._state.settings.model_copy(deep=True)

    @property
    def inputs(self) -> Inputs:
        return self._state.inputs.model_copy(deep=True)

    @property
    def outputs(self) -> Outputs:
        return self._state.outputs.model_copy(deep=True)

    @property
    def status(self) -> Status:
        return self._state.status.model_copy(deep=True)

    @property
    def generation_progress(self) -> GenerationProgress:
        return self._state.generation_progress.model_copy(deep=True)

    @property
    def generated_resume(self) -> str:
        return select_generated_resume(self._state)

    def is_ready_to_generate(self) -> bool:
        """Both inputs long enough after trimming."""
        inputs = self._state.inputs
        return (
            len(inputs.resume_text.strip()) >= self.min_input_chars
            and len(inputs.job_text.strip()) >= self.min_input_chars
        )

    # =========================================================================
    # Updates
    # =========================================================================

    def update_inputs(self, partial: dict) -> Inputs:
        """Merge a partial inputs update.

        Raises:
            ValidationError: On unknown fields or invalid values.
        """
        inputs = merge_partial(self._state.inputs, partial)
        self._update(inputs=inputs)
        return self.inputs

    def update_settings(self, partial: dict) -> Settings:
        """Merge a partial settings update through the settings store."""
        return self.settings_store.update_settings(partial)

    def reset(self) -> None:
        """Clear inputs, outputs, status and progress.

        A generation still in flight is superseded and its result dropped.
        """
        self._generation_token += 1
        self._set(
            AppDataState(
                settings=self._state.settings,
                generation_progress=initial_progress(self._phases),
            )
        )

    def load_toolkit(self, record: ToolkitRecord) -> FlowStep | None:
        """Restore a saved toolkit into the builder.

        Older records may only carry a legacy résumé field, so the canonical
        field and its aliases are filled from whichever one is set.

        Returns:
            The first wizard step still missing an output, or None.
        """
        outputs = record.outputs.model_copy(deep=True)
        resume = select_generated_resume(AppDataState(outputs=outputs))
        if resume:
            outputs.resume = resume
            outputs.latest = resume
            outputs.targeted_resume = resume
            outputs.variants = OutputVariants(targeted=resume)

        if record.settings is not None:
            self.settings_store.update_settings(record.settings.model_dump())

        self._update(inputs=record.inputs.model_copy(deep=True), outputs=outputs)
        logger.info("Loaded toolkit %s", record.id)
        return first_incomplete_step(outputs)

    # =========================================================================
    # Generation
    # =========================================================================

    def begin_generation(self) -> int:
        """Mark a generation as in flight and return its token.

        Sets `status.loading` and resets progress synchronously, so a
        caller that checks `status.loading` before starting a run sees this
        one straight away. Pass the token to generate_resume().
        """
        self._generation_token += 1
        self._update(
            status=Status(loading=True, last_generated=self._state.status.last_generated),
            generation_progress=initial_progress(self._phases),
        )
        return self._generation_token

    async def generate_resume(self, token: int | None = None) -> str:
        """Run one generation and fan its result into the outputs.

        Args:
            token: Token from begin_generation(). A new run is begun if None.

        Returns:
            The generated résumé text, or "" if the run was superseded
            before it started.

        Raises:
            GenerationFailedError: If the generation call fails or returns
                no résumé. Other ResumeBuilderError types raised by the call
                propagate unchanged.
        """
        if token is None:
            token = self.begin_generation()
        elif token != self._generation_token:
            logger.info("Skipping superseded generation %d", token)
            return ""

        previous_status = self._state.status
        params = ResumeGenerationParams.from_state(self._state.settings, self._state.inputs)
        logger.info("Generation %d started (%s mode)", token, params.mode.value)

        timeline = asyncio.create_task(self._run_progress_timeline(token))
        try:
            result = _coerce_result(await self._call_generator(params))
            if not result.final_resume.strip():
                raise GenerationFailedError("Resume generation", "empty resume returned")
        except Exception as e:
            await self._stop_timeline(timeline)
            if token == self._generation_token:
                self._update(
                    status=Status(loading=False, last_generated=previous_status.last_generated),
                    generation_progress=fail_phase(self._state.generation_progress),
                )
            logger.error("Generation %d failed: %s", token, e)
            if isinstance(e, ResumeBuilderError):
                raise
            raise GenerationFailedError("Resume generation", str(e)) from e

        await self._stop_timeline(timeline)
        if token != self._generation_token:
            logger.info("Dropping result of superseded generation %d", token)
            return result.final_resume

        self._update(
            outputs=outputs_from_result(result),
            status=Status(loading=False, last_generated=self._clock()),
            generation_progress=complete_all(self._state.generation_progress),
        )
        logger.info("Generation %d completed", token)
        return result.final_resume

    async def run_generation(self, token: int | None = None) -> str:
        """Alias of generate_resume()."""
        return await self.generate_resume(token)

    async def _call_generator(self, params: ResumeGenerationParams) -> Any:
        if inspect.iscoroutinefunction(self._generator):
            return await self._generator(params)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self._generator, params)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _run_progress_timeline(self, token: int) -> None:
        """Walk the phases on their cosmetic durations.

        The last phase is left active; only the real call completes it.
        """
        for index, phase in enumerate(self._phases):
            if token != self._generation_token:
                return
            self._update(
                generation_progress=activate_phase(self._state.generation_progress, phase.id)
            )
            if index == len(self._phases) - 1:
                return

            await asyncio.sleep(phase.estimated_duration_seconds * self.time_scale)
            if token != self._generation_token:
                return
            self._update(
                generation_progress=complete_phase(self._state.generation_progress, phase.id)
            )

    @staticmethod
    async def _stop_timeline(timeline: asyncio.Task) -> None:
        timeline.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await timeline

    # =========================================================================
    # State & Persistence
    # =========================================================================

    def _update(self, **changes) -> None:
        self._set(self._state.model_copy(update=changes))

    def _set(self, new_state: AppDataState) -> None:
        previous = self._state
        if (
            previous.inputs != new_state.inputs
            or previous.outputs != new_state.outputs
        ):
            self._persist(new_state)
        super()._set(new_state)

    def _persist(self, state: AppDataState) -> None:
        self.storage.set_json(
            APP_DATA_STORAGE_KEY,
            {
                "state": {
                    "inputs": state.inputs.model_dump(mode="json"),
                    "outputs": state.outputs.model_dump(mode="json"),
                },
                "version": 0,
            },
        )

    def _rehydrate(self) -> tuple[Inputs, Outputs]:
        stored = self.storage.get_json(APP_DATA_STORAGE_KEY)
        if not isinstance(stored, dict):
            return Inputs(), Outputs()

        state = stored.get("state") or {}
        try:
            return (
                Inputs.model_validate(state.get("inputs") or {}),
                Outputs.model_validate(state.get("outputs") or {}),
            )
        except PydanticValidationError as e:
            logger.warning("Discarding invalid persisted app data: %s", e)
            return Inputs(), Outputs()

    def _on_settings_changed(self, settings: Settings) -> None:
        self._update(settings=settings)
