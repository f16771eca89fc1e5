"""Tests for settings, profile and builder endpoints."""

from stores.settings_store import SETTINGS_STORAGE_KEY


class TestSettings:

    def test_defaults(self, client, auth_headers):
        resp = client.get("/api/v1/settings", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "mode": "detailed",
            "voice": "first-person",
            "format": "plain_text",
            "include_table": False,
            "proofread": True,
        }

    def test_partial_update(self, client, auth_headers, storage, app_data_store):
        resp = client.patch("/api/v1/settings", json={"mode": "concise"}, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["mode"] == "concise"
        assert resp.json()["voice"] == "first-person"
        assert storage.get_json(SETTINGS_STORAGE_KEY)["state"]["mode"] == "concise"
        assert app_data_store.settings.mode.value == "concise"

    def test_invalid_value(self, client, auth_headers):
        resp = client.patch("/api/v1/settings", json={"mode": "verbose"}, headers=auth_headers)
        assert resp.status_code == 422

    def test_reset(self, client, auth_headers):
        client.patch("/api/v1/settings", json={"include_table": True}, headers=auth_headers)
        resp = client.post("/api/v1/settings/reset", headers=auth_headers)
        assert resp.json()["include_table"] is False


class TestProfile:

    def test_update_and_reset(self, client, auth_headers):
        resp = client.patch(
            "/api/v1/profile", json={"display_name": "Jane", "job_title": "Staff Engineer"},
            headers=auth_headers,
        )
        assert resp.json()["display_name"] == "Jane"
        assert client.get("/api/v1/profile", headers=auth_headers).json()["job_title"] == "Staff Engineer"

        resp = client.post("/api/v1/profile/reset", headers=auth_headers)
        assert resp.json()["display_name"] == ""


class TestInputsOutputs:

    def test_patch_inputs_merges(self, client, auth_headers):
        client.patch("/api/v1/inputs", json={"resume_text": "My resume"}, headers=auth_headers)
        resp = client.patch("/api/v1/inputs", json={"company_name": "Acme"}, headers=auth_headers)

        assert resp.json()["resume_text"] == "My resume"
        assert resp.json()["company_name"] == "Acme"
        assert client.get("/api/v1/inputs", headers=auth_headers).json()["company_name"] == "Acme"

    def test_empty_outputs(self, client, auth_headers):
        body = client.get("/api/v1/outputs", headers=auth_headers).json()
        assert body["generated_resume"] == ""
        assert body["word_count"] == 0

    def test_reset(self, client, auth_headers, ready_inputs, settings_store):
        settings_store.update_settings({"mode": "executive"})

        resp = client.post("/api/v1/reset", headers=auth_headers)

        assert resp.status_code == 204
        assert client.get("/api/v1/inputs", headers=auth_headers).json()["resume_text"] == ""
        assert client.get("/api/v1/settings", headers=auth_headers).json()["mode"] == "executive"


class TestSteps:

    def test_invalid_step_defaults_to_resume(self, client, auth_headers):
        body = client.get("/api/v1/step", params={"step": "bogus"}, headers=auth_headers).json()
        assert body == {"step": "resume", "first_incomplete": "resume"}

    def test_valid_step(self, client, auth_headers):
        body = client.get("/api/v1/step", params={"step": "interview"}, headers=auth_headers).json()
        assert body["step"] == "interview"

    def test_load_legacy_toolkit(self, client, auth_headers):
        record = {
            "id": "tk-1",
            "title": "Acme application",
            "inputs": {"resume_text": "Old resume", "job_text": "Old job"},
            "outputs": {"latest": "Legacy resume body"},
        }

        resp = client.post("/api/v1/toolkits/load", json=record, headers=auth_headers)

        assert resp.json() == {"step": "cover-letter", "first_incomplete": "cover-letter"}
        outputs = client.get("/api/v1/outputs", headers=auth_headers).json()
        assert outputs["outputs"]["resume"] == "Legacy resume body"
        assert outputs["generated_resume"] == "Legacy resume body"
        assert outputs["word_count"] == 3

    def test_load_complete_toolkit(self, client, auth_headers):
        record = {
            "id": "tk-2",
            "outputs": {
                "resume": "R",
                "cover_letter": "C",
                "highlights": ["H"],
                "toolkit": {"questions": ["Q"]},
            },
            "settings": {"mode": "concise"},
        }

        resp = client.post("/api/v1/toolkits/load", json=record, headers=auth_headers)

        assert resp.json() == {"step": "resume", "first_incomplete": None}
        assert client.get("/api/v1/settings", headers=auth_headers).json()["mode"] == "concise"
