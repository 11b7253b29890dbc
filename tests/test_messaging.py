from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from firebase_admin import messaging

from src import messaging as relay_messaging
from src.messaging import MessagingClient


@pytest.mark.asyncio
async def test_send_forwards_message_dry_run_and_app(monkeypatch):
    sdk_send = MagicMock(return_value="projects/p/messages/1")
    monkeypatch.setattr(relay_messaging.messaging, "send", sdk_send)

    app = SimpleNamespace(name="test-app")
    client = MessagingClient(app, dry_run=True)
    message = messaging.Message(token="device-1")

    receipt = await client.send(message)

    assert receipt == "projects/p/messages/1"
    sdk_send.assert_called_once_with(message, dry_run=True, app=app)


@pytest.mark.asyncio
async def test_send_multicast_uses_send_each_for_multicast(monkeypatch):
    batch = SimpleNamespace(success_count=2, failure_count=0, responses=[])
    sdk_multicast = MagicMock(return_value=batch)
    monkeypatch.setattr(relay_messaging.messaging, "send_each_for_multicast", sdk_multicast)

    app = SimpleNamespace(name="test-app")
    client = MessagingClient(app)
    message = messaging.MulticastMessage(tokens=["a", "b"])

    assert await client.send_multicast(message) is batch
    sdk_multicast.assert_called_once_with(message, dry_run=False, app=app)


@pytest.mark.asyncio
async def test_send_propagates_provider_errors(monkeypatch):
    monkeypatch.setattr(
        relay_messaging.messaging, "send", MagicMock(side_effect=ValueError("boom"))
    )
    client = MessagingClient(SimpleNamespace(name="test-app"))

    with pytest.raises(ValueError, match="boom"):
        await client.send(messaging.Message(topic="news"))


def test_from_credentials_falls_back_to_application_default(monkeypatch, tmp_path):
    adc = object()
    initialize_app = MagicMock(return_value=SimpleNamespace(name="push-relay-x"))
    monkeypatch.setattr(relay_messaging.credentials, "ApplicationDefault", lambda: adc)
    monkeypatch.setattr(relay_messaging.firebase_admin, "initialize_app", initialize_app)

    client = MessagingClient.from_credentials(
        str(tmp_path / "missing.json"), project_id="demo-project", dry_run=True
    )

    assert client.dry_run is True
    assert client.app.name == "push-relay-x"
    args, kwargs = initialize_app.call_args
    assert args[0] is adc
    assert kwargs["options"] == {"projectId": "demo-project"}


def test_from_credentials_uses_service_account_file(monkeypatch, tmp_path):
    key_file = tmp_path / "serviceAccountKey.json"
    key_file.write_text("{}")

    certificate = MagicMock(return_value="cert")
    initialize_app = MagicMock(return_value=SimpleNamespace(name="push-relay-y"))
    monkeypatch.setattr(relay_messaging.credentials, "Certificate", certificate)
    monkeypatch.setattr(relay_messaging.firebase_admin, "initialize_app", initialize_app)

    MessagingClient.from_credentials(str(key_file))

    certificate.assert_called_once_with(str(key_file))
    assert initialize_app.call_args.args[0] == "cert"
    assert initialize_app.call_args.kwargs["options"] is None


def test_close_deletes_app(monkeypatch):
    delete_app = MagicMock()
    monkeypatch.setattr(relay_messaging.firebase_admin, "delete_app", delete_app)
    app = SimpleNamespace(name="test-app")

    MessagingClient(app).close()

    delete_app.assert_called_once_with(app)
