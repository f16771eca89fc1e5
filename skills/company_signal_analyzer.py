"""Company Signal Analyzer Skill - culture, values and priorities."""

import logging
from dataclasses import dataclass, field

from anthropic import APIError

from .base_skill import BaseSkill, SkillContext, SkillResult, non_empty_lines, strip_list_marker

logger = logging.getLogger(__name__)

SIGNAL_PROMPT = """Analyze this job description to extract company culture, values, and business priorities.

Job Description:
{job_description}
{company_notes}
Identify:
1. Company culture signals (collaborative, innovative, fast-paced, etc.)
2. Core values (customer-focused, integrity, excellence, etc.)
3. Business priorities (growth, efficiency, quality, etc.)

Return exactly three items per category, one item per line, in that order:
three culture lines, then three value lines, then three priority lines."""


@dataclass
class CompanySignals:
    """Signals the rewrite should reflect."""

    culture: list[str] = field(default_factory=list)
    values: list[str] = field(default_factory=list)
    priorities: list[str] = field(default_factory=list)


FALLBACK_SIGNALS = CompanySignals(
    culture=["collaborative", "innovative"],
    values=["excellence", "integrity"],
    priorities=["growth", "quality"],
)


class CompanySignalAnalyzerSkill(BaseSkill):
    """Skill that reads company signals from the posting and user notes."""

    def execute(self, context: SkillContext, **kwargs) -> SkillResult:
        params = context.params
        company_notes = ""
        if params.company_signal:
            company_notes = f"\nAdditional notes about the company:\n{params.company_signal}\n"

        try:
            response = self.client.complete(
                SIGNAL_PROMPT.format(
                    job_description=params.job_description,
                    company_notes=company_notes,
                )
            )
        except APIError as e:
            logger.warning("Company signal analysis failed, using fallback: %s", e)
            return SkillResult.ok(FALLBACK_SIGNALS, fallback=True)

        # Category headings are dropped; the remaining lines are taken in order.
        lines = [
            strip_list_marker(line)
            for line in non_empty_lines(response)
            if not line.rstrip().endswith(":")
        ]
        if not lines:
            return SkillResult.ok(FALLBACK_SIGNALS, fallback=True)

        return SkillResult.ok(
            CompanySignals(culture=lines[0:3], values=lines[3:6], priorities=lines[6:9])
        )
