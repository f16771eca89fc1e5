"""Redirect rules and wizard-step helpers.

Everything here is pure except ReturnToStore, which keeps the pending
post-auth redirect in local storage. Redirect bugs lock users out, so the
rules stay small and separately tested.
"""

import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit

from local_storage import LocalStorage
from services.models import FlowStep, Outputs

logger = logging.getLogger(__name__)

RETURN_TO_STORAGE_KEY = "returnTo"

WIZARD_STEPS: list[FlowStep] = [
    FlowStep.RESUME,
    FlowStep.COVER_LETTER,
    FlowStep.HIGHLIGHTS,
    FlowStep.INTERVIEW,
]


@dataclass
class FlowContext:
    """What the router knows about the signed-in user."""

    return_to: str | None = None
    has_profile: bool = False
    has_plan: bool = False
    plan: str | None = None
    onboarding_status: str | None = None
    is_new_user: bool = False


# =============================================================================
# Redirect Rules
# =============================================================================


def is_safe_return_to(target: str | None) -> bool:
    """Whether a returnTo target is a same-site relative path.

    Absolute URLs, scheme-relative "//host" paths and backslash tricks are
    rejected.
    """
    if not target or not target.startswith("/"):
        return False
    if target.startswith("//") or "\\" in target:
        return False
    parts = urlsplit(target)
    return not parts.scheme and not parts.netloc


def _honoured_return_to(ctx: FlowContext) -> str | None:
    if ctx.return_to and not is_safe_return_to(ctx.return_to):
        logger.warning("Ignoring unsafe returnTo target: %s", ctx.return_to)
        return None
    return ctx.return_to or None


def next_after_sign_in(ctx: FlowContext) -> str:
    """Route after sign-in: the returnTo target, else the dashboard."""
    return _honoured_return_to(ctx) or "/dashboard"


def next_after_sign_up(ctx: FlowContext | None = None) -> str:
    """Route after sign-up: the returnTo target, else pricing."""
    if ctx is not None:
        target = _honoured_return_to(ctx)
        if target:
            return target
    return "/pricing"


def next_after_pricing(ctx: FlowContext | None = None) -> str:
    return "/dashboard"


def next_from_dashboard(ctx: FlowContext | None = None) -> str:
    # The builder picks the step itself.
    return "/builder"


def needs_onboarding(ctx: FlowContext) -> bool:
    return not ctx.has_plan or ctx.onboarding_status == "new"


def get_authenticated_landing(ctx: FlowContext) -> str:
    """Landing route for a user who is already authenticated."""
    if needs_onboarding(ctx):
        return "/pricing"
    return "/dashboard"


# =============================================================================
# Wizard Steps
# =============================================================================


def safe_step(value: str | None) -> FlowStep:
    """Parse a ?step= value, defaulting to the résumé step."""
    try:
        return FlowStep(value)
    except ValueError:
        return FlowStep.RESUME


def first_incomplete_step(outputs: Outputs | None) -> FlowStep | None:
    """First wizard step whose output is still missing, or None when done."""
    if outputs is None or not outputs.resume:
        return FlowStep.RESUME
    if not outputs.cover_letter:
        return FlowStep.COVER_LETTER
    if not outputs.highlights:
        return FlowStep.HIGHLIGHTS
    if outputs.toolkit is None:
        return FlowStep.INTERVIEW
    return None


def preserve_query(current: str, updates: dict[str, str | list[str] | None]) -> str:
    """Apply query-parameter updates while keeping everything else.

    Args:
        current: Existing query string (without the leading "?").
        updates: New values. None leaves a key alone, a list replaces all
            values of a repeated key.

    Returns:
        The merged query string.
    """
    pairs = parse_qsl(current.lstrip("?"), keep_blank_values=True)
    for key, value in updates.items():
        if value is None:
            continue
        kept = [(k, v) for k, v in pairs if k != key]
        if isinstance(value, list):
            pairs = kept + [(key, str(v)) for v in value]
            continue

        # A single value takes the position of the first existing one.
        index = next((i for i, (k, _) in enumerate(pairs) if k == key), len(pairs))
        kept.insert(min(index, len(kept)), (key, str(value)))
        pairs = kept
    return urlencode(pairs)


def ensure_autostart(current: str, desired: str | None = None) -> str:
    """Keep ?autostart= set: the desired value, else the current one, else "1"."""
    params = dict(parse_qsl(current.lstrip("?"), keep_blank_values=True))
    value = desired or params.get("autostart") or "1"
    return preserve_query(current, {"autostart": value})


# =============================================================================
# Pending Redirect
# =============================================================================


class ReturnToStore:
    """Pending post-auth redirect, kept in local storage."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def set(self, url: str) -> None:
        self.storage.set_item(RETURN_TO_STORAGE_KEY, url)

    def get(self) -> str | None:
        return self.storage.get_item(RETURN_TO_STORAGE_KEY)

    def clear(self) -> None:
        self.storage.remove_item(RETURN_TO_STORAGE_KEY)

    def capture(self, query: str) -> str | None:
        """Remember a ?returnTo= from a query string if it is safe.

        Returns:
            The captured target, or None.
        """
        target = dict(parse_qsl(query.lstrip("?"))).get("returnTo")
        if not target:
            return None
        if not is_safe_return_to(target):
            logger.warning("Not capturing unsafe returnTo target: %s", target)
            return None
        self.set(target)
        return target

    def consume(self) -> str | None:
        """Read and clear the pending target."""
        target = self.get()
        self.clear()
        return target
