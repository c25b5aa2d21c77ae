"""
Test suite for the HTTP and WebSocket API.

The app runs with an injected container (fakes for every external
seam) inside TestClient, so the lifespan creates the tables on the
client's own event loop. Ingestion is dispatched inline.

System role: Verification of the API surface
"""

import pytest
from fastapi.testclient import TestClient

from ragengine.api.main import create_app
from ragengine.application.container import ModelServices, assemble_container
from ragengine.boundary.db.connection import get_async_engine
from ragengine.boundary.llm.model_service import ToolCall
from ragengine.boundary.vdb.memory_vector_store import InMemoryVectorStore
from fakes import InlineDispatcher

REPORT_URI = "file:///docs/report.txt"


@pytest.fixture
def api_container(settings, fake_model, fake_embeddings, fake_object_store, fake_ocr):
    fake_embeddings.rules = [("revenue", [1.0, 0.0, 0.0])]
    fake_object_store.objects[REPORT_URI] = b"Revenue grew 12% in the third quarter."
    container = assemble_container(
        settings,
        engine=get_async_engine(settings.database),
        models=ModelServices(chat=fake_model, summary=fake_model, planner=fake_model, ocr=fake_ocr),
        embedding_backend=fake_embeddings,
        object_store=fake_object_store,
        vector_store=InMemoryVectorStore(),
    )
    container.dispatcher = InlineDispatcher(container.pipeline)
    return container


@pytest.fixture
def client(api_container):
    with TestClient(create_app(api_container)) as test_client:
        yield test_client


def create_session(client: TestClient, user_id: str = "user-1") -> str:
    response = client.post("/api/v1/sessions", json={"user_id": user_id})
    assert response.status_code == 201
    return response.json()["id"]


def register_report(client: TestClient, source_uri: str = REPORT_URI) -> str:
    response = client.post(
        "/api/v1/documents",
        json={"owner_id": "user-1", "source_uri": source_uri, "mime_type": "text/plain"},
    )
    assert response.status_code == 201
    return response.json()["document_id"]


def receive_turn(websocket) -> list[dict]:
    """Read events until the turn completes or fails."""
    events = []
    while True:
        event = websocket.receive_json()
        events.append(event)
        if event["event"] in ("complete", "error"):
            return events


class TestHealth:
    def test_health_should_report_healthy(self, client) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_db_health_should_query_database(self, client) -> None:
        response = client.get("/api/v1/health/db")

        assert response.json() == {"status": "healthy", "message": "Database connection OK"}

    def test_response_should_echo_correlation_id(self, client) -> None:
        response = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["x-correlation-id"] == "abc-123"


class TestSessions:
    def test_create_and_get_session(self, client) -> None:
        # Arrange
        session_id = create_session(client)

        # Act
        response = client.get(f"/api/v1/sessions/{session_id}")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == "user-1"
        assert body["message_count"] == 0

    def test_unknown_session_should_be_404(self, client) -> None:
        response = client.get("/api/v1/sessions/no-such-session")

        assert response.status_code == 404
        assert response.json()["kind"] == "ResourceNotFound"

    def test_list_should_return_only_users_sessions(self, client) -> None:
        session_id = create_session(client, "user-1")
        create_session(client, "user-2")

        response = client.get("/api/v1/sessions", params={"user_id": "user-1"})

        assert [s["id"] for s in response.json()] == [session_id]

    def test_empty_user_id_should_be_rejected(self, client) -> None:
        response = client.post("/api/v1/sessions", json={"user_id": ""})

        assert response.status_code == 422


class TestDocuments:
    """Register, ingest and poll documents."""

    def test_register_should_create_uploaded_document(self, client) -> None:
        response = client.post(
            "/api/v1/documents",
            json={"owner_id": "user-1", "source_uri": REPORT_URI, "mime_type": "text/plain"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "uploaded"
        assert body["name"] == "report.txt"

    def test_register_should_reject_unknown_scheme(self, client) -> None:
        response = client.post(
            "/api/v1/documents",
            json={"owner_id": "user-1", "source_uri": "ftp://host/report.txt", "mime_type": "text/plain"},
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_ingest_should_be_accepted_and_processed(self, client, api_container) -> None:
        # Arrange
        document_id = register_report(client)

        # Act
        accepted = client.post(f"/api/v1/documents/{document_id}/ingest")
        status = client.get(f"/api/v1/documents/{document_id}")

        # Assert
        assert accepted.status_code == 202
        assert accepted.json()["accepted"] is True
        assert api_container.dispatcher.dispatched == [(document_id, False)]
        assert status.json()["status"] == "processed"
        assert status.json()["chunk_count"] == 1

    def test_second_ingest_should_be_a_no_op(self, client, api_container) -> None:
        document_id = register_report(client)
        client.post(f"/api/v1/documents/{document_id}/ingest")

        again = client.post(f"/api/v1/documents/{document_id}/ingest")

        assert again.status_code == 202
        assert again.json() == {"document_id": document_id, "status": "processed", "accepted": False}
        assert len(api_container.dispatcher.dispatched) == 1

    def test_reingest_should_dispatch_reset(self, client, api_container) -> None:
        document_id = register_report(client)
        client.post(f"/api/v1/documents/{document_id}/ingest")

        response = client.post(f"/api/v1/documents/{document_id}/ingest", params={"reingest": "true"})

        assert response.json()["accepted"] is True
        assert api_container.dispatcher.dispatched[-1] == (document_id, True)

    def test_failed_extraction_should_be_reported_terminal(self, client) -> None:
        document_id = register_report(client, source_uri="file:///docs/missing.txt")

        client.post(f"/api/v1/documents/{document_id}/ingest")
        status = client.get(f"/api/v1/documents/{document_id}").json()

        assert status["status"] == "failed"
        assert status["failure_kind"] == "terminal"

    def test_unknown_document_should_be_404(self, client) -> None:
        assert client.get("/api/v1/documents/no-such-document").status_code == 404
        assert client.post("/api/v1/documents/no-such-document/ingest").status_code == 404

    def test_list_should_return_owner_documents(self, client) -> None:
        document_id = register_report(client)

        response = client.get("/api/v1/documents", params={"owner_id": "user-1"})

        assert [d["document_id"] for d in response.json()] == [document_id]


class TestGoals:
    def test_goal_should_return_plan(self, client, fake_model) -> None:
        # Arrange
        session_id = create_session(client)
        fake_model.tool_calls = [
            ToolCall(name="read_only_query", args={"sql": "SELECT COUNT(*) AS n FROM user_sessions"})
        ]

        # Act
        response = client.post(f"/api/v1/sessions/{session_id}/goals", json={"goal": "How many sessions?"})

        # Assert
        assert response.status_code == 200
        plan = response.json()
        assert plan["status"] == "completed"
        assert plan["final_answer"]["rows"] == [[1]]

    def test_halted_plan_should_not_be_an_http_error(self, client, fake_model) -> None:
        session_id = create_session(client)
        fake_model.tool_calls = [ToolCall(name="read_only_query", args={"sql": "DELETE FROM messages"})]

        response = client.post(f"/api/v1/sessions/{session_id}/goals", json={"goal": "Wipe my history"})

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert response.json()["error_kind"] == "SecurityViolation"

    def test_goal_for_unknown_session_should_be_404(self, client) -> None:
        response = client.post("/api/v1/sessions/no-such-session/goals", json={"goal": "Anything"})

        assert response.status_code == 404


class TestChatWebSocket:
    """WS /api/v1/ws/sessions/{session_id}/chat"""

    def test_grounded_turn_should_stream_and_persist(self, client) -> None:
        # Arrange
        session_id = create_session(client)
        document_id = register_report(client)
        client.post(f"/api/v1/documents/{document_id}/ingest")

        # Act
        with client.websocket_connect(f"/api/v1/ws/sessions/{session_id}/chat") as websocket:
            connected = websocket.receive_json()
            websocket.send_json({"event": "chat", "data": {"message": "How did revenue change?", "turn_id": "t1"}})
            events = receive_turn(websocket)

        # Assert
        assert connected == {"event": "connected", "data": {"session_id": session_id}}
        assert [e["event"] for e in events] == ["context", "token", "token", "token", "complete"]
        [citation] = events[0]["data"]["citations"]
        assert citation["documentName"] == "report.txt"
        assert citation["sourceLabel"].startswith("lines ")
        assert "".join(e["data"]["token"] for e in events[1:4]) == "Revenue grew 12% [1]."
        assert events[-1]["data"]["citations"] == [citation]

        messages = client.get(f"/api/v1/sessions/{session_id}/messages").json()
        assert [(m["role"], m["turn_id"]) for m in messages] == [("user", "t1"), ("assistant", "t1")]

    def test_failed_turn_should_offer_regeneration(self, client, fake_model) -> None:
        # Arrange
        session_id = create_session(client)
        fake_model.fail_after = 2

        # Act
        with client.websocket_connect(f"/api/v1/ws/sessions/{session_id}/chat") as websocket:
            websocket.receive_json()
            websocket.send_json({"event": "chat", "data": {"message": "Summarize", "turn_id": "t1"}})
            failed = receive_turn(websocket)
            fake_model.fail_after = None
            websocket.send_json({"event": "chat", "data": {"message": "Summarize", "turn_id": "t1"}})
            retried = receive_turn(websocket)

        # Assert
        assert failed[-1]["event"] == "error"
        assert failed[-1]["data"]["regenerate_available"] is True
        assert retried[-1]["event"] == "complete"
        messages = client.get(f"/api/v1/sessions/{session_id}/messages").json()
        assistants = [m for m in messages if m["role"] == "assistant"]
        assert len(assistants) == 1
        assert assistants[0]["truncated"] is False

    def test_ping_should_get_pong(self, client) -> None:
        session_id = create_session(client)

        with client.websocket_connect(f"/api/v1/ws/sessions/{session_id}/chat") as websocket:
            websocket.receive_json()
            websocket.send_json({"event": "ping"})

            assert websocket.receive_json() == {"event": "pong"}

    @pytest.mark.parametrize(
        "payload",
        ["not json", '["a list"]', '{"event": "dance"}', '{"event": "chat", "data": {"message": ""}}'],
    )
    def test_bad_client_event_should_get_validation_error(self, client, payload: str) -> None:
        session_id = create_session(client)

        with client.websocket_connect(f"/api/v1/ws/sessions/{session_id}/chat") as websocket:
            websocket.receive_json()
            websocket.send_text(payload)
            error = websocket.receive_json()

        assert error["event"] == "error"
        assert error["data"]["kind"] == "ValidationError"

    def test_unknown_session_should_send_not_found(self, client) -> None:
        with client.websocket_connect("/api/v1/ws/sessions/no-such-session/chat") as websocket:
            websocket.receive_json()
            websocket.send_json({"event": "chat", "data": {"message": "hi"}})
            error = websocket.receive_json()

        assert error["event"] == "error"
        assert error["data"]["kind"] == "ResourceNotFound"
        assert error["data"]["regenerate_available"] is False
