"""Deliverables Generator Skill - cover letter, highlights, toolkit, KPI tracker."""

import logging
import re
from dataclasses import dataclass, field

from anthropic import APIError

from services.models import InterviewToolkit

from .base_skill import BaseSkill, SkillContext, SkillResult, non_empty_lines, strip_list_marker

logger = logging.getLogger(__name__)

COVER_LETTER_PROMPT = """Write a compelling cover letter under 250 words based on this resume and job description.

RESUME:
{resume}

JOB DESCRIPTION:
{job_description}

REQUIREMENTS:
1. Open with specific connection to the role
2. Highlight 2-3 key achievements from resume
3. Show understanding of company needs
4. Close with confident next steps
5. Maximum 250 words, professional and engaging tone

Write the cover letter:"""

HIGHLIGHTS_PROMPT = """Create 5 compelling bullet points that a recruiter can quickly scan based on this resume.

RESUME:
{resume}

Create 5 bullet points with:
1. Quantifiable achievements
2. Relevant experience highlights
3. Key skills alignment
4. Notable accomplishments
5. Clear value proposition

Each bullet should be under 15 words and include metrics where possible.
Return as a numbered list:"""

TOOLKIT_PROMPT = """Create interview preparation materials based on this resume and job description.

RESUME:
{resume}

JOB DESCRIPTION:
{job_description}

Provide:
1. 5 likely interview questions based on job requirements
2. A professional follow-up email template (under 150 words)
3. 3 potential skill gaps to address

Format as:
QUESTIONS:
[list questions]

FOLLOW-UP EMAIL:
[email template]

SKILL GAPS:
[list gaps]"""

KPI_PROMPT = """Create a weekly job search KPI tracking template for someone pursuing this type of role.

TARGET ROLE: {target_role}

Create a weekly checklist with metrics for:
1. Application activities
2. Networking efforts
3. Skill development
4. Interview preparation
5. Follow-up actions

Format as a simple checklist:"""

TOOLKIT_SECTIONS = re.compile(r"QUESTIONS:|FOLLOW-UP EMAIL:|SKILL GAPS:")

FALLBACK_QUESTIONS = [
    "Tell me about yourself and your background",
    "Why are you interested in this role?",
    "What are your greatest strengths?",
    "Describe a challenging project you've worked on",
    "Where do you see yourself in 5 years?",
]

FALLBACK_FOLLOW_UP = (
    "Thank you for taking the time to interview me today. I'm very excited about "
    "the opportunity to contribute to your team and look forward to hearing about next steps."
)

FALLBACK_SKILL_GAPS = [
    "Industry-specific knowledge",
    "Advanced technical skills",
    "Leadership experience",
]

FALLBACK_COVER_LETTER = (
    "I am writing to express my strong interest in this position. Based on my "
    "experience and skills outlined in my resume, I believe I would be a valuable "
    "addition to your team."
)

FALLBACK_HIGHLIGHTS = [
    "Experienced professional with relevant background",
    "Strong track record of delivering results",
    "Excellent communication and collaboration skills",
    "Proven ability to adapt and learn quickly",
    "Committed to continuous improvement and growth",
]

FALLBACK_KPI_TRACKER = """WEEKLY JOB SEARCH KPI TRACKER

Applications Sent: ___ / 5
Networking Touches: ___ / 3
Interview Invites: ___
Phone Screens: ___
Final Interviews: ___
Offers Received: ___

Weekly Goals:
- Send 5 targeted applications
- Make 3 meaningful networking connections
- Schedule 1+ interview
- Follow up on pending applications
- Update LinkedIn with recent achievements"""


@dataclass
class Deliverables:
    """Everything produced alongside the final résumé."""

    cover_letter: str
    recruiter_highlights: list[str] = field(default_factory=list)
    interview_toolkit: InterviewToolkit = field(default_factory=InterviewToolkit)
    weekly_kpi_tracker: str = ""


def fallback_deliverables() -> Deliverables:
    return Deliverables(
        cover_letter=FALLBACK_COVER_LETTER,
        recruiter_highlights=list(FALLBACK_HIGHLIGHTS),
        interview_toolkit=InterviewToolkit(
            questions=list(FALLBACK_QUESTIONS),
            follow_up_email=FALLBACK_FOLLOW_UP,
            skill_gaps=list(FALLBACK_SKILL_GAPS),
        ),
        weekly_kpi_tracker=FALLBACK_KPI_TRACKER,
    )


def parse_toolkit(text: str) -> InterviewToolkit:
    """Split a toolkit response on its section headings.

    Missing or empty sections get the generic fallback content.
    """
    sections = TOOLKIT_SECTIONS.split(text)

    def section(index: int) -> str:
        return sections[index] if len(sections) > index else ""

    questions = [strip_list_marker(line) for line in non_empty_lines(section(1))][:5]
    follow_up = section(2).strip()
    gaps = [strip_list_marker(line) for line in non_empty_lines(section(3))][:3]

    return InterviewToolkit(
        questions=questions or FALLBACK_QUESTIONS[:3],
        follow_up_email=follow_up or FALLBACK_FOLLOW_UP,
        skill_gaps=gaps or list(FALLBACK_SKILL_GAPS),
    )


class DeliverablesGeneratorSkill(BaseSkill):
    """Skill that writes the supporting documents for a final résumé.

    Any failed call replaces the whole set with fallback content.
    """

    def execute(self, context: SkillContext, resume: str = "", **kwargs) -> SkillResult:
        """Generate cover letter, highlights, interview toolkit and KPI tracker.

        Args:
            context: Execution context with generation params.
            resume: The final résumé text.

        Returns:
            SkillResult with Deliverables data.
        """
        job_description = context.params.job_description
        try:
            cover_letter = self.client.complete(
                COVER_LETTER_PROMPT.format(resume=resume, job_description=job_description)
            )

            highlights_response = self.client.complete(HIGHLIGHTS_PROMPT.format(resume=resume))
            highlights = [
                strip_list_marker(line) for line in non_empty_lines(highlights_response)
            ][:5]

            toolkit = parse_toolkit(
                self.client.complete(
                    TOOLKIT_PROMPT.format(resume=resume, job_description=job_description)
                )
            )

            first_line = job_description.strip().splitlines()[0] if job_description.strip() else ""
            kpi_tracker = self.client.complete(
                KPI_PROMPT.format(target_role=first_line or "Target Role")
            )
        except APIError as e:
            logger.warning("Deliverables generation failed, using fallback: %s", e)
            return SkillResult.ok(fallback_deliverables(), fallback=True)

        return SkillResult.ok(
            Deliverables(
                cover_letter=cover_letter or FALLBACK_COVER_LETTER,
                recruiter_highlights=highlights or list(FALLBACK_HIGHLIGHTS),
                interview_toolkit=toolkit,
                weekly_kpi_tracker=kpi_tracker or FALLBACK_KPI_TRACKER,
            )
        )
