"""Tests for VersionService (saved résumés and version history)."""

import pytest

from services import VersionService
from services.exceptions import (
    AuthenticationError,
    BackendError,
    ResumeNotFoundError,
    SubscriptionRequiredError,
)
from services.models import Inputs, Outputs, ResumeMode, Settings


RESUME_ROW = {
    "id": "r-1",
    "profile_id": "p-1",
    "title": "Payments roles",
    "created_at": "2026-10-01T10:00:00+00:00",
    "updated_at": "2026-10-02T10:00:00+00:00",
}

VERSION_ROW = {
    "id": "v-1",
    "resume_id": "r-1",
    "inputs": {"resume_text": "old resume", "job_text": "old job"},
    "outputs": {"resume": "Tailored resume", "highlights": ["Cut deploys 60%"]},
    "settings": {"mode": "concise"},
    "created_at": "2026-10-02T10:00:00+00:00",
}


@pytest.fixture
def versions(test_config, mock_backend):
    return VersionService(config=test_config, backend=mock_backend)


def _tables(mock_backend, resumes=None, versions=None):
    """Answer select_rows per table."""
    def select_rows(table, filters, order_by=None, descending=True):
        rows = resumes if table == "resumes" else versions
        return [
            row for row in rows or []
            if all(row.get(column) == value for column, value in filters.items())
        ]
    mock_backend.select_rows.side_effect = select_rows


class TestResumes:

    def test_list_resumes(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[RESUME_ROW])

        resumes = versions.list_resumes(pro_profile)

        assert [r.title for r in resumes] == ["Payments roles"]
        mock_backend.select_rows.assert_called_once_with(
            "resumes", {"profile_id": "p-1"}, order_by="updated_at"
        )

    def test_requires_signed_in_profile(self, versions, mock_backend):
        with pytest.raises(AuthenticationError):
            versions.list_resumes(None)
        mock_backend.select_rows.assert_not_called()

    def test_create_resume(self, versions, mock_backend, free_profile):
        _tables(mock_backend, resumes=[])
        mock_backend.insert_row.return_value = {"id": "r-9", "profile_id": "p-2", "title": "New"}

        resume = versions.create_resume(free_profile, "New")

        assert resume.id == "r-9"
        mock_backend.insert_row.assert_called_once_with("resumes", {"profile_id": "p-2", "title": "New"})

    def test_free_plan_limited_to_one_resume(self, versions, mock_backend, free_profile):
        _tables(mock_backend, resumes=[{**RESUME_ROW, "profile_id": "p-2"}])

        with pytest.raises(SubscriptionRequiredError) as exc_info:
            versions.create_resume(free_profile, "Second")

        assert exc_info.value.details["feature"] == "unlimited_resumes"
        mock_backend.insert_row.assert_not_called()

    def test_pro_unlimited(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[RESUME_ROW, {**RESUME_ROW, "id": "r-2"}])
        mock_backend.insert_row.return_value = {"id": "r-3", "profile_id": "p-1"}

        assert versions.create_resume(pro_profile).title == "Untitled Resume"


class TestSaveDraft:

    def test_new_resume_then_version(self, versions, mock_backend, free_profile):
        _tables(mock_backend, resumes=[])
        mock_backend.insert_row.side_effect = [
            {"id": "r-5", "profile_id": "p-2", "title": "Draft"},
            {"id": "v-5", "resume_id": "r-5", "outputs": {"resume": "Tailored"}},
        ]

        version = versions.save_draft(
            free_profile,
            Inputs(resume_text="my resume", job_text="the job"),
            Outputs(resume="Tailored"),
            Settings(mode=ResumeMode.CONCISE),
            title="Draft",
        )

        assert version.id == "v-5"
        assert version.resume_id == "r-5"
        table, values = mock_backend.insert_row.call_args_list[1][0]
        assert table == "resume_versions"
        assert values["resume_id"] == "r-5"
        assert values["inputs"]["resume_text"] == "my resume"
        assert values["outputs"]["resume"] == "Tailored"
        assert values["settings"]["mode"] == "concise"

    def test_existing_resume(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[RESUME_ROW])
        mock_backend.insert_row.return_value = {**VERSION_ROW, "id": "v-2"}

        version = versions.save_draft(pro_profile, Inputs(), Outputs(), Settings(), resume_id="r-1")

        assert version.id == "v-2"
        mock_backend.insert_row.assert_called_once()

    def test_other_profiles_resume(self, versions, mock_backend, free_profile):
        _tables(mock_backend, resumes=[RESUME_ROW])

        with pytest.raises(ResumeNotFoundError):
            versions.save_draft(free_profile, Inputs(), Outputs(), Settings(), resume_id="r-1")
        mock_backend.insert_row.assert_not_called()


class TestHistory:

    def test_list_versions(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[RESUME_ROW], versions=[VERSION_ROW])

        history = versions.list_versions(pro_profile, "r-1")

        assert [v.id for v in history] == ["v-1"]
        assert history[0].settings.mode == ResumeMode.CONCISE
        mock_backend.select_rows.assert_called_with(
            "resume_versions", {"resume_id": "r-1"}, order_by="created_at"
        )

    def test_history_needs_pro(self, versions, mock_backend, free_profile):
        with pytest.raises(SubscriptionRequiredError) as exc_info:
            versions.list_versions(free_profile, "r-1")

        assert exc_info.value.details["feature"] == "version_history"
        mock_backend.select_rows.assert_not_called()

    def test_history_signed_out(self, versions):
        with pytest.raises(AuthenticationError):
            versions.list_versions(None, "r-1")

    def test_restore_version(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[RESUME_ROW], versions=[VERSION_ROW])

        version = versions.restore_version(pro_profile, "v-1")
        record = version.to_toolkit_record()

        assert record.id == "v-1"
        assert record.inputs.resume_text == "old resume"
        assert record.outputs.resume == "Tailored resume"

    def test_restore_missing(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[], versions=[])
        with pytest.raises(ResumeNotFoundError):
            versions.restore_version(pro_profile, "v-404")

    def test_restore_other_profiles_version(self, versions, mock_backend, pro_profile):
        other = pro_profile.model_copy(update={"id": "p-3"})
        _tables(mock_backend, resumes=[RESUME_ROW], versions=[VERSION_ROW])

        with pytest.raises(ResumeNotFoundError) as exc_info:
            versions.restore_version(other, "v-1")

        assert exc_info.value.resource_id == "v-1"

    def test_malformed_row(self, versions, mock_backend, pro_profile):
        _tables(mock_backend, resumes=[RESUME_ROW], versions=[{"id": "v-1", "resume_id": "r-1", "inputs": "bad"}])

        with pytest.raises(BackendError):
            versions.restore_version(pro_profile, "v-1")
