"""
Tests for the Flask JSON adapter
"""

import pytest
from flask import Flask

from flask_stepwizard.adapters.api import WizardApi, WizardManager
from flask_stepwizard.config import WizardConfig

from .utils import CONTACT, IDENTITY, PREFERENCES


def start(client):
    response = client.post("/wizard/")
    assert response.status_code == 201
    return response.get_json()["id"]


def edit(client, wizard_id, values):
    for name, value in values.items():
        response = client.post(f"/wizard/{wizard_id}/fields", json={"name": name, "value": value})
        assert response.status_code == 200
    return response


class TestWizardApi:
    """Test the HTTP endpoints"""

    def test_start(self, client):
        response = client.post("/wizard/")

        assert response.status_code == 201
        body = response.get_json()
        assert body["id"]
        assert "record" not in body
        wizard = body["wizard"]
        assert wizard["step_index"] == 0
        assert wizard["step_name"] == "identity"
        assert wizard["step_count"] == 3
        assert wizard["status"] == "in_progress"
        assert wizard["is_first_step"] is True
        assert [f["name"] for f in wizard["fields"]] == ["firstName", "lastName", "age"]
        assert wizard["fields"][0] == {
            "name": "firstName",
            "label": "First name",
            "value": None,
            "error": None,
            "required": True,
            "description": None,
        }

    def test_show(self, client):
        wizard_id = start(client)
        edit(client, wizard_id, {"firstName": "Ada"})

        response = client.get(f"/wizard/{wizard_id}")

        assert response.status_code == 200
        assert response.get_json()["wizard"]["fields"][0]["value"] == "Ada"

    def test_next_with_errors(self, client):
        wizard_id = start(client)
        edit(client, wizard_id, {"firstName": "Ada"})

        response = client.post(f"/wizard/{wizard_id}/next")

        assert response.status_code == 200
        wizard = response.get_json()["wizard"]
        assert wizard["step_index"] == 0
        errors = {f["name"]: f["error"] for f in wizard["fields"]}
        assert errors == {
            "firstName": None,
            "lastName": "Last name is required",
            "age": "Age is required",
        }

    def test_full_flow(self, client, app, completed_records):
        wizard_id = start(client)
        edit(client, wizard_id, IDENTITY)
        assert client.post(f"/wizard/{wizard_id}/next").get_json()["wizard"]["step_index"] == 1
        edit(client, wizard_id, CONTACT)
        back = client.post(f"/wizard/{wizard_id}/back").get_json()["wizard"]
        assert back["step_index"] == 0
        assert back["fields"][1]["value"] == "Lovelace"
        client.post(f"/wizard/{wizard_id}/next")
        edit(client, wizard_id, CONTACT)
        client.post(f"/wizard/{wizard_id}/next")
        edit(client, wizard_id, PREFERENCES)

        response = client.post(f"/wizard/{wizard_id}/submit")

        assert response.status_code == 200
        body = response.get_json()
        expected = {**IDENTITY, **CONTACT, **PREFERENCES}
        assert body["wizard"]["status"] == "completed"
        assert body["record"] == expected
        assert completed_records == [expected]
        assert wizard_id not in app.extensions["stepwizard"].manager

    def test_completed_wizard_is_gone(self, client):
        wizard_id = start(client)
        for values in (IDENTITY, CONTACT, PREFERENCES):
            edit(client, wizard_id, values)
            client.post(f"/wizard/{wizard_id}/next")

        response = client.get(f"/wizard/{wizard_id}")

        assert response.status_code == 404
        assert "not found" in response.get_json()["message"]

    def test_back_on_first_step(self, client):
        wizard_id = start(client)

        response = client.post(f"/wizard/{wizard_id}/back")

        assert response.status_code == 409
        assert response.get_json()["operation"] == "retreat"

    def test_submit_before_last_step(self, client):
        wizard_id = start(client)

        response = client.post(f"/wizard/{wizard_id}/submit")

        assert response.status_code == 409
        assert response.get_json()["operation"] == "submit"

    def test_unknown_field(self, client):
        wizard_id = start(client)

        response = client.post(
            f"/wizard/{wizard_id}/fields", json={"name": "email", "value": "ada@analytical.org"}
        )

        assert response.status_code == 400
        assert response.get_json()["field"] == "email"

    @pytest.mark.parametrize("payload", [
        None,
        {},
        {"name": "firstName"},
        {"name": "", "value": "Ada"},
        {"name": "firstName", "value": 12},
    ])
    def test_invalid_payload(self, client, payload):
        wizard_id = start(client)

        response = client.post(f"/wizard/{wizard_id}/fields", json=payload)

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid payload"

    def test_unknown_wizard(self, client):
        response = client.post("/wizard/missing/next")
        assert response.status_code == 404

    def test_capacity(self, client):
        for _ in range(3):
            start(client)

        response = client.post("/wizard/")

        assert response.status_code == 503
        assert response.get_json()["message"] == "Too many active wizards, try again later"

    def test_dismiss(self, client):
        wizard_id = start(client)

        response = client.delete(f"/wizard/{wizard_id}")

        assert response.status_code == 204
        assert client.get(f"/wizard/{wizard_id}").status_code == 404
        assert client.delete(f"/wizard/{wizard_id}").status_code == 404

    def test_dismiss_frees_capacity(self, client):
        wizard_ids = [start(client) for _ in range(3)]
        assert client.post("/wizard/").status_code == 503

        client.delete(f"/wizard/{wizard_ids[0]}")

        assert client.post("/wizard/").status_code == 201

    def test_extension_registered(self, app):
        api = app.extensions["stepwizard"]

        assert isinstance(api, WizardApi)
        assert api.config.url_prefix == "/wizard"
        assert api.config.max_active_wizards == 3


class TestWizardManager:
    """Test the in-memory wizard registry"""

    def test_start_get_discard(self, registry):
        manager = WizardManager(registry)

        wizard_id, adapter = manager.start()

        assert wizard_id in manager
        assert manager.get(wizard_id) is adapter
        manager.discard(wizard_id)
        assert len(manager) == 0
        manager.discard(wizard_id)

    def test_wizards_are_independent(self, registry):
        manager = WizardManager(registry)
        first_id, first = manager.start()
        _, second = manager.start()

        first.on_field_change("firstName", "Ada")

        assert first.machine.draft["firstName"] == "Ada"
        assert second.machine.draft["firstName"] is None
        assert len(manager) == 2
        assert manager.get(first_id) is first

    def test_idle_wizards_expire_on_start(self, registry):
        now = [0.0]
        manager = WizardManager(
            registry,
            config=WizardConfig(max_active_wizards=2, idle_timeout_minutes=10),
            clock=lambda: now[0],
        )
        stale_id, _ = manager.start()
        now[0] = 300.0
        active_id, _ = manager.start()

        now[0] = 700.0
        fresh_id, _ = manager.start()

        assert stale_id not in manager
        assert active_id in manager
        assert fresh_id in manager

    def test_access_keeps_wizard_alive(self, registry):
        now = [0.0]
        manager = WizardManager(
            registry, config=WizardConfig(idle_timeout_minutes=10), clock=lambda: now[0]
        )
        wizard_id, _ = manager.start()
        now[0] = 500.0
        manager.get(wizard_id)

        now[0] = 1000.0

        assert manager.expire_idle() == 0
        assert wizard_id in manager

    def test_zero_timeout_never_expires(self, registry):
        now = [0.0]
        manager = WizardManager(
            registry, config=WizardConfig(idle_timeout_minutes=0), clock=lambda: now[0]
        )
        wizard_id, _ = manager.start()
        now[0] = 10 ** 9

        assert manager.expire_idle() == 0
        assert wizard_id in manager


class TestCompletionHandlerFailure:
    """Test a completion handler that raises"""

    @pytest.fixture
    def client(self, registry):
        def reject(record):
            raise RuntimeError("booking service down")

        app = Flask(__name__)
        app.config.update({"TESTING": True, "STEPWIZARD_URL_PREFIX": "/wizard"})
        WizardApi(registry, app, completion_handler=reject)
        return app.test_client()

    def test_record_is_still_returned(self, client):
        wizard_id = start(client)
        for values in (IDENTITY, CONTACT, PREFERENCES):
            edit(client, wizard_id, values)
            response = client.post(f"/wizard/{wizard_id}/next")

        assert response.status_code == 500
        body = response.get_json()
        assert body["record"] == {**IDENTITY, **CONTACT, **PREFERENCES}
        assert body["wizard"]["status"] == "completed"
        assert body["message"] == "Completion handler failed: booking service down"
        assert client.get(f"/wizard/{wizard_id}").status_code == 404
