"""Generation service - the seven-phase résumé generation flow.

This is the generation call the app-data store invokes. Each phase is a
stateless skill; phases that can degrade gracefully fall back to generic
content, while a failed rewrite fails the whole run.
"""

import json
import logging
import math
import re
from datetime import datetime, timezone

import quality_check
from skills import (
    CompanySignalAnalyzerSkill,
    CompetencyExtractorSkill,
    DeliverablesGeneratorSkill,
    ProofreaderSkill,
    ResumeOptimizerSkill,
    ResumePolishSkill,
    ResumeReviewSkill,
    SkillContext,
)

from .base_service import BaseService
from .exceptions import GenerationFailedError, ValidationError
from .models import OutputFormat, OutputMetadata, ResumeGenerationParams, ResumeGenerationResult

logger = logging.getLogger(__name__)

MIN_JOB_DESCRIPTION_CHARS = 50

_MARKDOWN_STRIPS = [
    (re.compile(r"#{1,6}\s*"), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE), "• "),
]


def format_output(content: str, fmt: OutputFormat, now: datetime | None = None) -> str:
    """Render résumé text in the requested output format.

    Markdown is returned as-is, plain text has markdown syntax stripped and
    bullets normalised, JSON wraps the text with a generation timestamp.
    """
    if fmt == OutputFormat.JSON:
        return json.dumps(
            {
                "resume": content,
                "generatedAt": (now or datetime.now(timezone.utc)).isoformat(),
                "format": "json",
            },
            indent=2,
        )
    if fmt == OutputFormat.PLAIN_TEXT:
        for pattern, replacement in _MARKDOWN_STRIPS:
            content = pattern.sub(replacement, content)
        return content
    return content


def validate_params(params: ResumeGenerationParams) -> list[str]:
    """Return human-readable problems with a generation request (empty if valid)."""
    errors = []
    if not (params.resume_content.strip() or (params.manual_entry or "").strip()):
        errors.append("Resume content is required (either file upload or manual entry)")
    if len(params.job_description.strip()) < MIN_JOB_DESCRIPTION_CHARS:
        errors.append(
            f"Job description is required and must be at least {MIN_JOB_DESCRIPTION_CHARS} characters"
        )
    return errors


def estimate_processing_time(resume_length: int, job_description_length: int) -> int:
    """Rough wall-clock estimate in seconds, capped at two minutes."""
    resume_factor = math.ceil(resume_length / 1000) * 10
    job_factor = math.ceil(job_description_length / 500) * 5
    return min(30 + resume_factor + job_factor, 120)


class GenerationService(BaseService):
    """Runs the generation phases against Claude."""

    def generate(self, params: ResumeGenerationParams) -> ResumeGenerationResult:
        """Generate a tailored résumé and its deliverables.

        Args:
            params: Settings plus résumé content and job description.

        Returns:
            ResumeGenerationResult with the final résumé, deliverables and metadata.

        Raises:
            ValidationError: If the résumé or job description is missing.
            GenerationFailedError: If the rewrite phase fails.
            ConfigurationError: If no Anthropic API key is configured.
        """
        errors = validate_params(params)
        if errors:
            raise ValidationError("; ".join(errors))

        client = self.client
        context = SkillContext(config=self.config, params=params)

        logger.info(
            "Generating resume (mode=%s, voice=%s, format=%s)",
            params.mode.value, params.voice.value, params.format.value,
        )

        # Phase 1: core competencies
        competencies = CompetencyExtractorSkill(client, self.config).execute(context).data

        # Phase 2: company signals
        signals = CompanySignalAnalyzerSkill(client, self.config).execute(context).data

        # Phase 3: rewrite
        optimized = ResumeOptimizerSkill(client, self.config).execute(
            context, competencies=competencies, signals=signals
        )
        if not optimized.success:
            raise GenerationFailedError("Resume optimization", optimized.error)

        # Phase 4: rapid review
        score = ResumeReviewSkill(client, self.config).execute(
            context, resume=optimized.data
        ).data

        # Phase 5: final output
        polished = ResumePolishSkill(client, self.config).execute(
            context, resume=optimized.data, score=score
        )
        final_resume = format_output(polished.data, params.format)

        # Phase 6: deliverables
        deliverables = DeliverablesGeneratorSkill(client, self.config).execute(
            context, resume=final_resume
        ).data

        # Phase 7: grammar and readability
        grammar_score = None
        if params.proofread:
            grammar_score = ProofreaderSkill(client, self.config).execute(
                context, text=final_resume
            ).data

        quality = quality_check.perform_quality_check(
            final_resume, params.job_description, params.mode
        )

        logger.info("Generation complete (review score %d/5, quality %.2f)", score, quality.score)
        return ResumeGenerationResult(
            final_resume=final_resume,
            cover_letter=deliverables.cover_letter,
            recruiter_highlights=deliverables.recruiter_highlights,
            interview_toolkit=deliverables.interview_toolkit,
            weekly_kpi_tracker=deliverables.weekly_kpi_tracker,
            grammar_score=grammar_score,
            metadata=OutputMetadata(
                phase="Complete",
                optimization_score=score,
                keywords_matched=len(competencies),
                word_count=len(final_resume.split()),
                grammar_score=grammar_score,
                quality_score=quality.score,
                quality_rationale=quality.rationale,
            ),
        )
