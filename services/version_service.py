"""Version service - saved résumés and their draft history.

Drafts live in two tables: `resumes` (one row per résumé, owned by a
profile) and `resume_versions` (one row per saved draft). Any signed-in
user may save drafts within their plan's résumé limit. Browsing and
restoring earlier versions needs Pro.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

import entitlements

from .base_service import BaseService
from .exceptions import (
    AuthenticationError,
    BackendError,
    ResumeNotFoundError,
    SubscriptionRequiredError,
)
from .models import (
    Inputs,
    Outputs,
    ResumeRecord,
    ResumeVersion,
    Settings,
    SubscriptionProfile,
)

logger = logging.getLogger(__name__)

RESUMES_TABLE = "resumes"
VERSIONS_TABLE = "resume_versions"

DEFAULT_TITLE = "Untitled Resume"


class VersionService(BaseService):
    """Creates résumés, saves drafts and restores earlier versions."""

    def list_resumes(self, profile: SubscriptionProfile | None) -> list[ResumeRecord]:
        """The profile's résumés, most recently updated first."""
        rows = self.backend.select_rows(
            RESUMES_TABLE, {"profile_id": self._profile_id(profile)}, order_by="updated_at"
        )
        return self._validate_rows(RESUMES_TABLE, rows, ResumeRecord)

    def create_resume(
        self, profile: SubscriptionProfile | None, title: str = DEFAULT_TITLE
    ) -> ResumeRecord:
        """Create an empty résumé for the profile.

        Raises:
            AuthenticationError: Without a signed-in profile.
            SubscriptionRequiredError: If the plan's résumé limit is reached.
        """
        profile_id = self._profile_id(profile)
        limit = entitlements.get_feature_limits(profile).max_resumes
        if limit is not None and len(self.list_resumes(profile)) >= limit:
            raise SubscriptionRequiredError("unlimited_resumes")

        row = self.backend.insert_row(RESUMES_TABLE, {"profile_id": profile_id, "title": title})
        resume = self._validate(RESUMES_TABLE, row, ResumeRecord)
        logger.info("Created resume %s for profile %s", resume.id, profile_id)
        return resume

    def save_draft(
        self,
        profile: SubscriptionProfile | None,
        inputs: Inputs,
        outputs: Outputs,
        settings: Settings,
        title: str = DEFAULT_TITLE,
        resume_id: str | None = None,
    ) -> ResumeVersion:
        """Save the builder's state as a new version.

        Args:
            profile: The signed-in user's profile.
            inputs: Builder inputs to save.
            outputs: Generated outputs to save.
            settings: Generation settings to save.
            title: Title of the new résumé when resume_id is None.
            resume_id: Existing résumé to add the version to.

        Returns:
            The stored version.

        Raises:
            ResumeNotFoundError: If resume_id is not one of the profile's résumés.
        """
        if resume_id is None:
            resume_id = self.create_resume(profile, title).id
        else:
            self._get_resume(profile, resume_id)

        row = self.backend.insert_row(
            VERSIONS_TABLE,
            {
                "resume_id": resume_id,
                "inputs": inputs.model_dump(mode="json"),
                "outputs": outputs.model_dump(mode="json"),
                "settings": settings.model_dump(mode="json"),
            },
        )
        version = self._validate(VERSIONS_TABLE, row, ResumeVersion)
        logger.info("Saved version %s of resume %s", version.id, resume_id)
        return version

    def list_versions(
        self, profile: SubscriptionProfile | None, resume_id: str
    ) -> list[ResumeVersion]:
        """Saved versions of one résumé, newest first. Pro only."""
        self._profile_id(profile)
        entitlements.require_access("version_history", profile)
        self._get_resume(profile, resume_id)

        rows = self.backend.select_rows(
            VERSIONS_TABLE, {"resume_id": resume_id}, order_by="created_at"
        )
        return self._validate_rows(VERSIONS_TABLE, rows, ResumeVersion)

    def restore_version(
        self, profile: SubscriptionProfile | None, version_id: str
    ) -> ResumeVersion:
        """Load one saved version for restoring into the builder. Pro only.

        Raises:
            ResumeNotFoundError: If the version does not exist or belongs to
                another profile's résumé.
        """
        self._profile_id(profile)
        entitlements.require_access("version_history", profile)

        rows = self.backend.select_rows(VERSIONS_TABLE, {"id": version_id})
        if not rows:
            raise ResumeNotFoundError("version", version_id)
        version = self._validate(VERSIONS_TABLE, rows[0], ResumeVersion)
        try:
            self._get_resume(profile, version.resume_id)
        except ResumeNotFoundError:
            raise ResumeNotFoundError("version", version_id) from None
        return version

    # =========================================================================
    # Internal
    # =========================================================================

    @staticmethod
    def _profile_id(profile: SubscriptionProfile | None) -> str:
        if profile is None or not profile.id:
            raise AuthenticationError("Sign in to save résumé drafts")
        return profile.id

    def _get_resume(self, profile: SubscriptionProfile | None, resume_id: str) -> ResumeRecord:
        rows = self.backend.select_rows(
            RESUMES_TABLE, {"id": resume_id, "profile_id": self._profile_id(profile)}
        )
        if not rows:
            raise ResumeNotFoundError("resume", resume_id)
        return self._validate(RESUMES_TABLE, rows[0], ResumeRecord)

    @staticmethod
    def _validate(table: str, row: dict, model):
        try:
            return model.model_validate(row)
        except PydanticValidationError as e:
            logger.error("Unexpected %s row: %s", table, e)
            raise BackendError(f"{table}.select", "unexpected row shape") from e

    @classmethod
    def _validate_rows(cls, table: str, rows: list[dict], model) -> list:
        return [cls._validate(table, row, model) for row in rows]
