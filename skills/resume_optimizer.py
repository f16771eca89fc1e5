"""Resume optimisation skills: rewrite, rapid review and final polish."""

import logging

from anthropic import APIError

from services.models import ResumeMode, Voice

from .base_skill import BaseSkill, SkillContext, SkillResult, parse_score
from .company_signal_analyzer import CompanySignals

logger = logging.getLogger(__name__)

WORD_LIMITS = {
    ResumeMode.CONCISE: 350,
    ResumeMode.DETAILED: 550,
    ResumeMode.EXECUTIVE: 450,
}

MODE_INSTRUCTIONS = {
    ResumeMode.CONCISE: "Keep bullets under 20 words. Focus on quantifiable results. Maximum 350 words total.",
    ResumeMode.DETAILED: "Provide comprehensive bullets with context, action, and results. Maximum 550 words total.",
    ResumeMode.EXECUTIVE: "Emphasize leadership, strategic initiatives, and organizational impact. Maximum 450 words total.",
}

VOICE_INSTRUCTIONS = {
    Voice.FIRST_PERSON: "Use first-person voice (I, my, me)",
    Voice.THIRD_PERSON: "Use third-person voice (candidate, they, their)",
}

OPTIMIZE_PROMPT = """You are an expert ATS resume writer. Rewrite this resume to optimize for both ATS systems and human reviewers.

INSTRUCTIONS:
- {voice}
- {mode}
- Include these key competencies naturally: {competencies}
- Align with company culture: {culture}
- Reflect company values: {values}
- Address business priorities: {priorities}

ORIGINAL RESUME:
{resume}

TARGET JOB DESCRIPTION:
{job_description}

REQUIREMENTS:
1. Include ALL relevant competencies naturally in the text
2. Quantify achievements with specific metrics where possible
3. Use strong action verbs and industry keywords
4. Ensure ATS compatibility with clean formatting
5. Make every word count toward landing an interview
{table}
Rewrite the resume now:"""

TABLE_INSTRUCTION = "\nInclude a skills table at the end with technical competencies organized by category.\n"

REVIEW_PROMPT = """Rate this resume on a scale of 1-5 (5 = excellent) based on how well it matches the job requirements.

RESUME:
{resume}

JOB DESCRIPTION:
{job_description}

Evaluate based on:
- Keyword alignment with job requirements
- Quantified achievements and impact
- ATS compatibility and formatting
- Overall readability and professional presentation

Return only a number from 1 to 5."""

POLISH_PROMPT = """This resume scored {score}/5 and needs improvement. Apply final polish focusing on:

RESUME TO IMPROVE:
{resume}

IMPROVEMENTS NEEDED:
1. Stronger action verbs and power words
2. More specific quantifiable metrics and achievements
3. Better keyword integration for ATS optimization
4. Improved readability and professional flow

Maximum word count: {word_limit}

Provide the improved resume:"""

DEFAULT_REVIEW_SCORE = 3
POLISH_THRESHOLD = 4


class ResumeOptimizerSkill(BaseSkill):
    """Rewrites the résumé against competencies and company signals.

    This is the one phase without a fallback: a failure fails the run.
    """

    def execute(
        self,
        context: SkillContext,
        competencies: list[str] | None = None,
        signals: CompanySignals | None = None,
        **kwargs,
    ) -> SkillResult:
        params = context.params
        signals = signals or CompanySignals()

        try:
            response = self.client.complete(
                OPTIMIZE_PROMPT.format(
                    voice=VOICE_INSTRUCTIONS[params.voice],
                    mode=MODE_INSTRUCTIONS[params.mode],
                    competencies=", ".join(competencies or []),
                    culture=", ".join(signals.culture),
                    values=", ".join(signals.values),
                    priorities=", ".join(signals.priorities),
                    resume=params.resume_content or params.manual_entry or "",
                    job_description=params.job_description,
                    table=TABLE_INSTRUCTION if params.include_table else "",
                ),
                max_tokens=2048,
            )
        except APIError as e:
            return SkillResult.fail(f"Resume optimization failed: {e}")

        if not response:
            return SkillResult.fail("Resume optimization returned no content")
        return SkillResult.ok(response)


class ResumeReviewSkill(BaseSkill):
    """Scores a draft 1-5 against the job description."""

    def execute(self, context: SkillContext, resume: str = "", **kwargs) -> SkillResult:
        try:
            response = self.client.complete(
                REVIEW_PROMPT.format(
                    resume=resume, job_description=context.params.job_description
                ),
                max_tokens=16,
                temperature=0.0,
            )
        except APIError as e:
            logger.warning("Rapid review failed, using default score: %s", e)
            return SkillResult.ok(DEFAULT_REVIEW_SCORE, fallback=True)

        return SkillResult.ok(parse_score(response, 1, 5, DEFAULT_REVIEW_SCORE))


class ResumePolishSkill(BaseSkill):
    """One more improvement pass for drafts scoring below 4.

    Drafts at or above the threshold, and failed polish calls, keep the
    optimised text unchanged.
    """

    def execute(
        self, context: SkillContext, resume: str = "", score: int = DEFAULT_REVIEW_SCORE, **kwargs
    ) -> SkillResult:
        if score >= POLISH_THRESHOLD:
            return SkillResult.ok(resume, polished=False)

        try:
            response = self.client.complete(
                POLISH_PROMPT.format(
                    score=score,
                    resume=resume,
                    word_limit=WORD_LIMITS[context.params.mode],
                ),
                max_tokens=2048,
            )
        except APIError as e:
            logger.warning("Final polish failed, keeping optimized draft: %s", e)
            return SkillResult.ok(resume, polished=False, fallback=True)

        return SkillResult.ok(response or resume, polished=bool(response))
