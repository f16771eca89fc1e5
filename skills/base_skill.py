"""Base skill class and common data structures for stateless skills."""

import re
from dataclasses import dataclass, field
from typing import Any

from claude_client import ClaudeClient
from services.models import ResumeGenerationParams


@dataclass
class SkillContext:
    """Context passed to skill execution.

    Skills are stateless - they receive all needed context through this object.
    """

    config: dict
    """Application configuration."""

    params: ResumeGenerationParams
    """Settings and inputs of the generation run."""

    extra: dict = field(default_factory=dict)
    """Additional context specific to the skill."""


@dataclass
class SkillResult:
    """Result returned from skill execution."""

    success: bool
    """Whether the skill executed successfully."""

    data: Any = None
    """The primary result data (type varies by skill)."""

    error: str | None = None
    """Error message if success is False."""

    metadata: dict = field(default_factory=dict)
    """Additional metadata about the execution."""

    @classmethod
    def ok(cls, data: Any, **metadata) -> "SkillResult":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata) -> "SkillResult":
        """Create a failed result."""
        return cls(success=False, error=error, metadata=metadata)

    @property
    def used_fallback(self) -> bool:
        return bool(self.metadata.get("fallback"))


class BaseSkill:
    """Base class for all skills.

    Skills are stateless tools that:
    - Receive context and inputs
    - Perform one focused Claude call (or a short chain of them)
    - Return structured results

    Skills should NOT:
    - Maintain state between calls
    - Make decisions about workflow
    - Print to console (that's the caller's job)
    """

    def __init__(self, client: ClaudeClient, config: dict):
        """Initialize the skill.

        Args:
            client: ClaudeClient instance for API calls.
            config: Application configuration dictionary.
        """
        self.client = client
        self.config = config

    def execute(self, context: SkillContext, **kwargs) -> SkillResult:
        """Execute the skill.

        Args:
            context: Execution context with config and generation params.
            **kwargs: Skill-specific arguments.

        Returns:
            SkillResult with success/failure and data.
        """
        raise NotImplementedError("Subclasses must implement execute()")


# =============================================================================
# Response parsing helpers
# =============================================================================

_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")
_LEADING_INT = re.compile(r"^\s*(-?\d+)")


def non_empty_lines(text: str) -> list[str]:
    """Non-blank lines of a response, stripped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def strip_list_marker(line: str) -> str:
    """Remove a leading "1." / "-" / "•" list marker."""
    return _LIST_MARKER.sub("", line).strip()


def parse_score(text: str, low: int, high: int, default: int) -> int:
    """Parse a leading integer, clamped to [low, high].

    Returns default when the response does not start with a number.
    """
    match = _LEADING_INT.match(text or "")
    if not match:
        return default
    return max(low, min(high, int(match.group(1))))
