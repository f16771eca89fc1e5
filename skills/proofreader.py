"""Proofreader Skill - grammar and readability score."""

import logging

from anthropic import APIError

from .base_skill import BaseSkill, SkillContext, SkillResult, parse_score

logger = logging.getLogger(__name__)

DEFAULT_GRAMMAR_SCORE = 75

GRAMMAR_PROMPT = """Analyze the readability and grammar of this text. Provide a score from 0-100 based on:
- Grammar correctness
- Sentence structure and flow
- Professional language use
- Clarity and conciseness

TEXT TO ANALYZE:
{text}

Return only a number from 0 to 100."""


class ProofreaderSkill(BaseSkill):
    def execute(self, context: SkillContext, text: str = "", **kwargs) -> SkillResult:
        try:
            response = self.client.complete(
                GRAMMAR_PROMPT.format(text=text), max_tokens=16, temperature=0.0
            )
        except APIError as e:
            logger.warning("Grammar check failed, using default score: %s", e)
            return SkillResult.ok(DEFAULT_GRAMMAR_SCORE, fallback=True)

        return SkillResult.ok(parse_score(response, 0, 100, DEFAULT_GRAMMAR_SCORE))
