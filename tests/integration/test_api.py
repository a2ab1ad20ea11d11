"""Integration tests for API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from video_studio.api.dependencies import get_shared_orchestrator


@pytest.fixture
def app(orchestrator):
    """App whose orchestrator dependency is the zero-latency test orchestrator."""
    from video_studio.main import app

    app.dependency_overrides[get_shared_orchestrator] = lambda: orchestrator
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def test_root_endpoint(client):
    """Root endpoint returns basic info."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Video Studio"
    assert data["status"] == "running"


async def test_health_endpoint(client):
    """Health endpoint reports the session."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"]["orchestrator"]["messages"] == 1
    assert data["components"]["orchestrator"]["backend_profile"] == "runway-gen4"


async def test_request_id_header(client):
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.headers["X-Request-ID"]


class TestConversationRoutes:
    async def test_list_messages_starts_with_welcome(self, client):
        response = await client.get("/conversation/messages")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["in_flight"] == 0
        assert data["messages"][0]["role"] == "system"

    async def test_submit_turn_and_wait(self, client):
        response = await client.post(
            "/conversation/turns",
            params={"wait": "true"},
            json={"text": "cyberpunk city at night"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["succeeded"]
        assert data["intent"] == "generation"
        assert data["message"]["stage"] == "none"
        assert data["message"]["artifact_ref"] is not None
        assert data["message"]["directive"]["style"] == "landscape"
        assert (
            data["message"]["artifact"]["duration_seconds"]
            == data["message"]["directive"]["duration_seconds"]
        )

    async def test_submit_turn_in_background(self, client, orchestrator):
        response = await client.post(
            "/conversation/turns", json={"text": "make a video of a bird flying"}
        )

        assert response.status_code == 202
        data = response.json()
        assert data["backend_profile"] == "runway-gen4"

        await orchestrator.wait_idle()

        response = await client.get(f"/conversation/messages/{data['message_id']}")
        assert response.status_code == 200
        message = response.json()
        assert message["stage"] == "none"
        assert message["turn_id"] == data["turn_id"]
        assert message["artifact_ref"].endswith(message["artifact"]["artifact_id"])

    async def test_conversational_turn(self, client):
        response = await client.post(
            "/conversation/turns", params={"wait": "true"}, json={"text": "hello"}
        )

        data = response.json()
        assert data["intent"] == "conversation"
        assert data["message"]["artifact_ref"] is None

    async def test_whitespace_turn_rejected(self, client):
        response = await client.post("/conversation/turns", json={"text": "   "})

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "EmptyInputError"

        listing = await client.get("/conversation/messages")
        assert listing.json()["total"] == 1

    async def test_empty_turn_fails_validation(self, client):
        response = await client.post("/conversation/turns", json={"text": ""})

        assert response.status_code == 422

    async def test_unknown_message_is_404(self, client):
        response = await client.get("/conversation/messages/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "MessageNotFoundError"

    async def test_history(self, client):
        await client.post(
            "/conversation/turns", params={"wait": "true"}, json={"text": "hello"}
        )

        response = await client.get("/conversation/history")

        assert response.json() == {"history": ["hello"]}

    async def test_restart(self, client):
        await client.post(
            "/conversation/turns", params={"wait": "true"}, json={"text": "hello"}
        )

        response = await client.post("/conversation/restart")

        assert response.status_code == 200
        assert response.json()["total"] == 1


class TestBackendRoutes:
    async def test_list_backends(self, client):
        response = await client.get("/backends")

        assert response.status_code == 200
        data = response.json()
        assert data["selected"] == "runway-gen4"
        assert [p["id"] for p in data["profiles"]] == [
            "runway-gen4",
            "veo3",
            "banana",
            "custom",
        ]
        assert [p["selected"] for p in data["profiles"]] == [True, False, False, False]

    async def test_select_backend(self, client):
        response = await client.put("/backends/selected", json={"profile": "veo3"})

        assert response.status_code == 200
        assert response.json()["selected"] == "veo3"

        turn = await client.post(
            "/conversation/turns", params={"wait": "true"}, json={"text": "make a video"}
        )
        assert turn.json()["message"]["backend_profile"] == "veo3"

    async def test_select_unknown_backend(self, client):
        response = await client.put("/backends/selected", json={"profile": "nope"})

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "UnknownBackendProfileError"
