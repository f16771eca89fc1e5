"""Tests for saved-résumé and version-history endpoints."""

import pytest

RESUME_ROW = {"id": "r-1", "profile_id": "p-1", "title": "Payments roles"}

VERSION_ROW = {
    "id": "v-1",
    "resume_id": "r-1",
    "inputs": {"resume_text": "saved resume " * 10, "job_text": "saved job " * 10},
    "outputs": {"resume": "Saved tailored resume", "cover_letter": "Dear team"},
    "settings": {"mode": "executive"},
}


@pytest.fixture
def rows(mock_backend):
    """Backend tables as plain lists; select_rows filters them."""
    tables = {"resumes": [RESUME_ROW], "resume_versions": [VERSION_ROW]}

    def select_rows(table, filters, order_by=None, descending=True):
        return [
            row for row in tables[table]
            if all(row.get(column) == value for column, value in filters.items())
        ]

    mock_backend.select_rows.side_effect = select_rows
    return tables


@pytest.fixture
def signed_in_pro(current_profile, pro_profile):
    current_profile["profile"] = pro_profile
    return pro_profile


class TestResumes:

    def test_list(self, client, auth_headers, rows, signed_in_pro):
        resp = client.get("/api/v1/resumes", headers=auth_headers)

        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()] == ["r-1"]

    def test_signed_out(self, client, auth_headers, rows):
        resp = client.get("/api/v1/resumes", headers=auth_headers)

        assert resp.status_code == 401
        assert resp.json()["code"] == "AUTH_FAILED"

    def test_create(self, client, auth_headers, rows, mock_backend, signed_in_pro):
        mock_backend.insert_row.return_value = {"id": "r-2", "profile_id": "p-1", "title": "Staff roles"}

        resp = client.post("/api/v1/resumes", json={"title": "Staff roles"}, headers=auth_headers)

        assert resp.status_code == 201
        assert resp.json()["id"] == "r-2"

    def test_free_limit(self, client, auth_headers, rows, current_profile, free_profile):
        rows["resumes"] = [{**RESUME_ROW, "profile_id": "p-2"}]
        current_profile["profile"] = free_profile

        resp = client.post("/api/v1/resumes", json={"title": "Second"}, headers=auth_headers)

        assert resp.status_code == 402


class TestDrafts:

    def test_save_current_builder_state(
        self, client, auth_headers, ready_inputs, rows, mock_backend, signed_in_pro
    ):
        mock_backend.insert_row.return_value = {"id": "v-2", "resume_id": "r-1"}

        resp = client.post("/api/v1/resumes/drafts", json={"resume_id": "r-1"}, headers=auth_headers)

        assert resp.status_code == 201
        assert resp.json()["id"] == "v-2"
        table, values = mock_backend.insert_row.call_args[0]
        assert table == "resume_versions"
        assert values["inputs"]["resume_text"] == ready_inputs["resume_text"]

    def test_unknown_resume(self, client, auth_headers, rows, signed_in_pro):
        resp = client.post("/api/v1/resumes/drafts", json={"resume_id": "r-404"}, headers=auth_headers)
        assert resp.status_code == 404


class TestHistory:

    def test_list_versions(self, client, auth_headers, rows, signed_in_pro):
        resp = client.get("/api/v1/resumes/r-1/versions", headers=auth_headers)

        assert resp.status_code == 200
        assert [v["id"] for v in resp.json()] == ["v-1"]

    def test_free_plan_gets_402(self, client, auth_headers, rows, current_profile, free_profile):
        current_profile["profile"] = free_profile

        resp = client.get("/api/v1/resumes/r-1/versions", headers=auth_headers)

        assert resp.status_code == 402
        assert resp.json()["code"] == "SUBSCRIPTION_REQUIRED"

    def test_restore_into_builder(self, client, auth_headers, rows, signed_in_pro, app_data_store):
        resp = client.post("/api/v1/resumes/versions/v-1/restore", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["first_incomplete"] == "highlights"
        assert app_data_store.generated_resume == "Saved tailored resume"
        assert app_data_store.inputs.job_text == VERSION_ROW["inputs"]["job_text"]
        assert app_data_store.settings.mode.value == "executive"

    def test_restore_missing(self, client, auth_headers, rows, signed_in_pro):
        resp = client.post("/api/v1/resumes/versions/v-404/restore", headers=auth_headers)
        assert resp.status_code == 404
