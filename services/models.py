"""Pydantic models for Resume Builder stores and services.

State records held by the client-side stores, plus the request and
response models shared by the CLI and API layers.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================


class ResumeMode(str, Enum):
    """Résumé length/emphasis modes."""

    CONCISE = "concise"
    DETAILED = "detailed"
    EXECUTIVE = "executive"


class Voice(str, Enum):
    """Narrative voice of the generated documents."""

    FIRST_PERSON = "first-person"
    THIRD_PERSON = "third-person"


class OutputFormat(str, Enum):
    """Text format of the generated résumé."""

    MARKDOWN = "markdown"
    PLAIN_TEXT = "plain_text"
    JSON = "json"


class PhaseStatus(str, Enum):
    """Status of one generation-progress phase."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    ERROR = "error"


class Plan(str, Enum):
    """Subscription plans."""

    FREE = "free"
    PRO = "pro"


class FlowStep(str, Enum):
    """Wizard steps, in order."""

    RESUME = "resume"
    COVER_LETTER = "cover-letter"
    HIGHLIGHTS = "highlights"
    INTERVIEW = "interview"


class UsageFeature(str, Enum):
    """Features counted by the usage tracker."""

    RESUME_GENERATIONS = "resumeGenerations"
    COVER_LETTER_GENERATIONS = "coverLetterGenerations"
    HIGHLIGHT_GENERATIONS = "highlightGenerations"
    INTERVIEW_TOOLKIT_GENERATIONS = "interviewToolkitGenerations"


class ExportFormat(str, Enum):
    """Export file formats."""

    MD = "md"
    TXT = "txt"
    DOCX = "docx"


class TaskStatus(str, Enum):
    """Async task statuses."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# Store State
# =============================================================================


class Settings(BaseModel):
    """User-chosen generation options. Always fully populated."""

    mode: ResumeMode = ResumeMode.DETAILED
    voice: Voice = Voice.FIRST_PERSON
    format: OutputFormat = OutputFormat.PLAIN_TEXT
    include_table: bool = False
    proofread: bool = True


class ProfilePreferences(BaseModel):
    """Free-text identity fields kept by the profile store."""

    display_name: str = ""
    job_title: str = ""
    north_star: str = ""
    headline: str = ""


class Inputs(BaseModel):
    """Wizard inputs."""

    resume_text: str = ""
    job_text: str = ""
    company_signal: str | None = None
    company_name: str | None = None
    company_url: str | None = None


class InterviewToolkit(BaseModel):
    """Interview preparation materials."""

    questions: list[str] = Field(default_factory=list)
    follow_up_email: str = ""
    skill_gaps: list[str] = Field(default_factory=list)


class OutputMetadata(BaseModel):
    """Metadata reported by the generation call."""

    phase: str = ""
    optimization_score: int = 0
    keywords_matched: int = 0
    word_count: int = 0
    grammar_score: int | None = None
    quality_score: float | None = None
    quality_rationale: str | None = None


class OutputVariants(BaseModel):
    """Legacy variant container (deprecated, mirrors `resume`)."""

    targeted: str | None = None


class Outputs(BaseModel):
    """Generated documents.

    `resume` is the canonical field. `latest`, `targeted_resume` and
    `variants.targeted` are kept only so older readers keep working.
    """

    resume: str | None = None
    cover_letter: str | None = None
    highlights: list[str] = Field(default_factory=list)
    toolkit: InterviewToolkit | None = None
    weekly_kpi_tracker: str | None = None
    metadata: OutputMetadata | None = None

    latest: str | None = None
    targeted_resume: str | None = None
    variants: OutputVariants = Field(default_factory=OutputVariants)

    def current_resume(self) -> str:
        """First non-empty of resume, targeted_resume, latest, variants.targeted."""
        for candidate in (self.resume, self.targeted_resume, self.latest, self.variants.targeted):
            if candidate:
                return candidate
        return ""


class Status(BaseModel):
    """Generation status."""

    loading: bool = False
    last_generated: datetime | None = None


class GenerationPhase(BaseModel):
    """One named step of the simulated generation progress."""

    id: str
    title: str
    description: str
    estimated_duration_seconds: float
    status: PhaseStatus = PhaseStatus.PENDING


class GenerationProgress(BaseModel):
    """Ordered phases plus the current phase id and aggregate progress."""

    phases: list[GenerationPhase] = Field(default_factory=list)
    phase: str | None = None
    progress: int = Field(default=0, ge=0, le=100)


class AppDataState(BaseModel):
    """Snapshot of the whole app-data store."""

    settings: Settings = Field(default_factory=Settings)
    inputs: Inputs = Field(default_factory=Inputs)
    outputs: Outputs = Field(default_factory=Outputs)
    status: Status = Field(default_factory=Status)
    generation_progress: GenerationProgress = Field(default_factory=GenerationProgress)


class ToolkitRecord(BaseModel):
    """A saved toolkit (inputs + outputs + settings) that can be reloaded."""

    id: str
    title: str = ""
    inputs: Inputs = Field(default_factory=Inputs)
    outputs: Outputs = Field(default_factory=Outputs)
    settings: Settings | None = None
    created_at: str | None = None


class ResumeRecord(BaseModel):
    """A saved résumé. Its drafts are stored as ResumeVersion rows."""

    id: str
    profile_id: str | None = None
    title: str = "Untitled Resume"
    created_at: str | None = None
    updated_at: str | None = None


class ResumeVersion(BaseModel):
    """One saved draft of a résumé: the builder's inputs, outputs and settings."""

    id: str
    resume_id: str
    inputs: Inputs = Field(default_factory=Inputs)
    outputs: Outputs = Field(default_factory=Outputs)
    settings: Settings | None = None
    created_at: str | None = None

    def to_toolkit_record(self) -> ToolkitRecord:
        return ToolkitRecord(
            id=self.id,
            inputs=self.inputs,
            outputs=self.outputs,
            settings=self.settings,
            created_at=self.created_at,
        )


class QualityFactors(BaseModel):
    """Per-factor scores of a quality check, each 0-1."""

    keyword_alignment: float
    readability: float
    structure: float
    completeness: float


class QualityCheckResult(BaseModel):
    """Weighted 0-1 quality score of a résumé with a one-line rationale."""

    score: float
    rationale: str
    factors: QualityFactors


# =============================================================================
# Subscription & Usage
# =============================================================================


class SubscriptionProfile(BaseModel):
    """Subscription fields of a user's backend profile row."""

    id: str | None = None
    user_id: str | None = None
    email: str | None = None
    stripe_customer_id: str | None = None
    plan: Plan = Plan.FREE
    sub_status: str | None = None
    current_period_end: datetime | None = None


class FeatureLimits(BaseModel):
    """Plan-derived limits. None means unlimited."""

    max_resumes: int | None = 1
    max_toolkits: int | None = 3
    has_version_history: bool = False
    has_interview_toolkit: bool = False
    has_advanced_exports: bool = False
    has_priority_support: bool = False


class PlanInfo(BaseModel):
    """Plan display information."""

    plan_name: str
    display_name: str
    billing: str
    is_active: bool
    needs_upgrade: bool


class UsageStats(BaseModel):
    """Usage counters for the current month."""

    month: str
    counts: dict[str, int] = Field(default_factory=dict)


# =============================================================================
# Generation Call
# =============================================================================


class ResumeGenerationParams(BaseModel):
    """Request sent to the generation call."""

    mode: ResumeMode = ResumeMode.DETAILED
    voice: Voice = Voice.FIRST_PERSON
    format: OutputFormat = OutputFormat.PLAIN_TEXT
    include_table: bool = False
    proofread: bool = True
    resume_content: str = ""
    job_description: str = ""
    manual_entry: str | None = None
    company_signal: str | None = None

    @classmethod
    def from_state(cls, settings: Settings, inputs: Inputs) -> ResumeGenerationParams:
        """Build generation params from the current settings and inputs."""
        return cls(
            mode=settings.mode,
            voice=settings.voice,
            format=settings.format,
            include_table=settings.include_table,
            proofread=settings.proofread,
            resume_content=inputs.resume_text,
            job_description=inputs.job_text,
            company_signal=inputs.company_signal,
        )


class ResumeGenerationResult(BaseModel):
    """Result returned by the generation call."""

    final_resume: str
    cover_letter: str = ""
    recruiter_highlights: list[str] = Field(default_factory=list)
    interview_toolkit: InterviewToolkit = Field(default_factory=InterviewToolkit)
    weekly_kpi_tracker: str = ""
    grammar_score: int | None = None
    metadata: OutputMetadata = Field(default_factory=OutputMetadata)


# =============================================================================
# Admin RPC Responses
# =============================================================================


class AnalyticsTotals(BaseModel):
    users: int
    pro: int
    free: int
    toolkits_7d: int
    toolkits_30d: int
    active_7d: int


class DayCount(BaseModel):
    day: str
    count: int


class AnalyticsSeries(BaseModel):
    new_users_by_day: list[DayCount]
    toolkits_by_day: list[DayCount]


class AdminAnalyticsResponse(BaseModel):
    """Shape of the `admin_analytics_summary` RPC response."""

    totals: AnalyticsTotals
    series: AnalyticsSeries


class AdminUser(BaseModel):
    id: str
    email: str
    plan: str
    sub_status: str | None = None
    created_at: str
    last_active_at: str | None = None
    toolkits_count: int = 0
    is_admin: bool = False


class AdminToolkit(BaseModel):
    id: str
    profile_id: str
    user_email: str
    title: str
    company: str
    job_title: str
    created_at: str


# =============================================================================
# Request Models
# =============================================================================


class SettingsUpdateRequest(BaseModel):
    """Partial settings update."""

    mode: ResumeMode | None = None
    voice: Voice | None = None
    format: OutputFormat | None = None
    include_table: bool | None = None
    proofread: bool | None = None


class InputsUpdateRequest(BaseModel):
    """Partial inputs update."""

    resume_text: str | None = None
    job_text: str | None = None
    company_signal: str | None = None
    company_name: str | None = None
    company_url: str | None = None


class ProfileUpdateRequest(BaseModel):
    """Partial profile update."""

    display_name: str | None = None
    job_title: str | None = None
    north_star: str | None = None
    headline: str | None = None


class ExportRequest(BaseModel):
    """Request to export a generated document."""

    document: str = Field(default="resume", description="resume, cover_letter, highlights or kpi_tracker")
    format: ExportFormat = ExportFormat.MD


class AuthContextRequest(BaseModel):
    """User context for post-auth redirect decisions."""

    return_to: str | None = None
    has_profile: bool = False
    has_plan: bool = False
    plan: str | None = None
    onboarding_status: str | None = None
    is_new_user: bool = False


class SignInRequest(BaseModel):
    email: str
    password: str


class CreateResumeRequest(BaseModel):
    title: str = Field(default="Untitled Resume", min_length=1)


class SaveDraftRequest(BaseModel):
    """Save the builder's current state as a new version.

    Without a resume_id a new résumé is created with the given title.
    """

    resume_id: str | None = None
    title: str = Field(default="Untitled Resume", min_length=1)


# =============================================================================
# Response Models
# =============================================================================


class OutputsResponse(BaseModel):
    """Outputs plus the resolved current résumé."""

    outputs: Outputs
    generated_resume: str
    word_count: int


class GenerationStateResponse(BaseModel):
    """Status and progress of the current or last generation."""

    status: Status
    generation_progress: GenerationProgress


class EntitlementResponse(BaseModel):
    feature: str
    allowed: bool
    is_pro: bool


class FlowResponse(BaseModel):
    route: str


class StepResponse(BaseModel):
    step: FlowStep
    first_incomplete: FlowStep | None = None


class CheckoutResponse(BaseModel):
    url: str


class ExportResponse(BaseModel):
    document: str
    format: ExportFormat
    path: str | None = None
    content: str | None = None


class UsageFeatureResponse(BaseModel):
    """This month's usage of one feature against its free-tier limit."""

    feature: str
    used: int
    limit: int | None = None
    remaining: int | None = None
    reached: bool = False


class OnboardingResponse(BaseModel):
    user_id: str
    completed: bool


# =============================================================================
# Async Task Models
# =============================================================================


class TaskCreatedResponse(BaseModel):
    """Response when an async task is created."""

    task_id: str
    status: TaskStatus = TaskStatus.PENDING


class TaskStatusResponse(BaseModel):
    """Response when polling task status."""

    task_id: str
    status: TaskStatus
    result: Any | None = None
    error: str | None = None
    created_at: str | None = None
    completed_at: str | None = None
