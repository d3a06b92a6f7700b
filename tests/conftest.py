import pytest
from fastapi.testclient import TestClient

from annotation_mcp_server.annotation.batch import BatchProcessor
from annotation_mcp_server.annotation.relations import RelationManager
from annotation_mcp_server.annotation.service import AnnotationService
from annotation_mcp_server.api.dependencies import get_tool_services
from annotation_mcp_server.main import app
from annotation_mcp_server.sessions.store import SessionStore
from annotation_mcp_server.tools.base import ToolServices


def make_chunks():
    return [
        {"chunk_id": "c0", "position": 0, "text": "Schedule of fees"},
        {"chunk_id": "c1", "position": 2, "text": "Participant fee: $100"},
        {"chunk_id": "c2", "position": 3, "text": "(1) Waived for members"},
        {"chunk_id": "c3", "position": 4, "text": "Market data fees"},
    ]


@pytest.fixture
def chunks():
    return make_chunks()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def session_id(store, chunks):
    result = store.create({"chunks": chunks})
    assert result.success
    return result.data.session_id


@pytest.fixture
def service(store):
    return AnnotationService(store)


@pytest.fixture
def batch(service):
    return BatchProcessor(service)


@pytest.fixture
def relations(store):
    return RelationManager(store)


@pytest.fixture
def services(store):
    return ToolServices(store)


@pytest.fixture
def client(services):
    app.dependency_overrides[get_tool_services] = lambda: services
    with TestClient(app) as c:
        yield c
    app.dependency_overrides = {}
