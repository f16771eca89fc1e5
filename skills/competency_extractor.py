"""Competency Extractor Skill - pulls the role's core competencies."""

import logging

from anthropic import APIError

from .base_skill import BaseSkill, SkillContext, SkillResult, non_empty_lines, strip_list_marker

logger = logging.getLogger(__name__)

MAX_COMPETENCIES = 15

FALLBACK_COMPETENCIES = [
    "Communication",
    "Problem Solving",
    "Team Collaboration",
    "Project Management",
    "Stakeholder Management",
]

COMPETENCY_PROMPT = """Extract the top 10-15 core competencies from this job description that align with the candidate's existing experience.

Job Description:
{job_description}

Current Resume:
{resume_content}

Focus on hard skills, certifications, technologies, and specific methodologies mentioned.
Return as a simple list, one skill per line."""


class CompetencyExtractorSkill(BaseSkill):
    """Skill that lists the competencies the rewrite should work in."""

    def execute(self, context: SkillContext, **kwargs) -> SkillResult:
        """Extract competencies shared by the job description and résumé.

        Returns:
            SkillResult with a list of up to 15 competency strings. Falls
            back to a generic list (metadata fallback=True) on API errors.
        """
        params = context.params
        try:
            response = self.client.complete(
                COMPETENCY_PROMPT.format(
                    job_description=params.job_description,
                    resume_content=params.resume_content or params.manual_entry or "",
                )
            )
        except APIError as e:
            logger.warning("Competency extraction failed, using fallback: %s", e)
            return SkillResult.ok(list(FALLBACK_COMPETENCIES), fallback=True)

        competencies = [strip_list_marker(line) for line in non_empty_lines(response)]
        competencies = [c for c in competencies if c][:MAX_COMPETENCIES]
        if not competencies:
            return SkillResult.ok(list(FALLBACK_COMPETENCIES), fallback=True)
        return SkillResult.ok(competencies)
