import json
import uuid

import pytest

from annotation_mcp_server.tools.base import TOOL_REGISTRY, dispatch_tool_call
from annotation_mcp_server.tools.definitions import TOOL_DEFINITIONS


def call(services, name, args):
    response = dispatch_tool_call(name, args, services)
    return response.is_error, json.loads(response.content[0].text)


@pytest.fixture
def started(services, chunks):
    is_error, body = call(services, "start_session", {"config": {"chunks": chunks}})
    assert not is_error
    return body["sessionId"]


def test_definitions_match_registry():
    names = [tool["name"] for tool in TOOL_DEFINITIONS]
    assert names == [
        "start_session",
        "annotate_chunk",
        "annotate_chunks",
        "add_relation",
        "get_progress",
        "export_annotations",
    ]
    assert set(names) == set(TOOL_REGISTRY)


def test_input_schemas_use_wire_names():
    schemas = {tool["name"]: tool["inputSchema"] for tool in TOOL_DEFINITIONS}

    assert set(schemas["annotate_chunk"]["required"]) == {"sessionId", "chunkId"}
    assert schemas["add_relation"]["properties"]["relationType"]
    assert schemas["annotate_chunks"]["properties"]["annotations"]["minItems"] == 1


def test_start_session(services, chunks):
    is_error, body = call(services, "start_session", {"config": {"chunks": chunks}})

    assert not is_error
    assert body["chunkCount"] == 4
    assert uuid.UUID(body["sessionId"]).version == 4


def test_start_session_invalid_config(services):
    is_error, body = call(services, "start_session", {"config": {"chunks": []}})

    assert is_error
    assert body["type"] == "InvalidConfig"
    assert body["issues"]


def test_start_session_duplicate_ids(services):
    chunks = [
        {"chunk_id": "x", "position": 0, "text": ""},
        {"chunk_id": "x", "position": 1, "text": ""},
    ]
    is_error, body = call(services, "start_session", {"config": {"chunks": chunks}})

    assert is_error
    assert body == {
        "type": "DuplicateChunkId",
        "chunkId": "x",
        "message": "Duplicate chunk_id found: x",
    }


def test_annotate_chunk(services, started):
    is_error, body = call(services, "annotate_chunk", {
        "sessionId": started,
        "chunkId": "c1",
        "categories": ["fee_schedule"],
        "labels": ["Fee Schedule"],
        "subtypes": {"fee_schedule": "participant_fee"},
    })

    assert not is_error
    assert body["chunk_id"] == "2_fee_schedule_Fee Schedule"
    assert body["subtypes"] == {"fee_schedule": "participant_fee"}


def test_annotate_chunk_omitted_fields_stay_omitted(services, started):
    call(services, "annotate_chunk", {"sessionId": started, "chunkId": "c1", "tags": ["a"]})
    is_error, body = call(services, "annotate_chunk", {
        "sessionId": started,
        "chunkId": "c1",
        "notes": "later",
    })

    assert not is_error
    assert body["tags"] == ["a"]
    assert body["notes"] == "later"


def test_annotate_chunk_domain_error(services, started):
    is_error, body = call(services, "annotate_chunk", {
        "sessionId": started,
        "chunkId": "c1",
        "subtypes": {"footnotes": "reference"},
    })

    assert is_error
    assert body["type"] == "SubtypeCategoryMismatch"


def test_schema_rejects_bad_arguments(services, started):
    is_error, body = call(services, "annotate_chunk", {
        "sessionId": "not-a-uuid",
        "chunkId": "c1",
        "categories": ["invoices"],
    })

    assert is_error
    assert body["type"] == "ValidationError"
    fields = {issue["loc"][0] for issue in body["issues"]}
    assert {"sessionId", "categories"} <= fields


def test_unknown_session_id(services):
    is_error, body = call(services, "get_progress", {"sessionId": str(uuid.uuid4())})

    assert is_error
    assert body["type"] == "SessionNotFound"


def test_annotate_chunks(services, started):
    is_error, body = call(services, "annotate_chunks", {
        "sessionId": started,
        "annotations": [
            {"chunkId": "c0", "notes": "a"},
            {"chunkId": "nope", "notes": "b"},
        ],
    })

    assert not is_error
    assert body["successCount"] == 1
    assert body["errorCount"] == 1
    assert body["results"][1] == {
        "chunkId": "nope",
        "success": False,
        "error": {"type": "ChunkNotFound", "message": "Chunk not found in session: nope"},
    }


def test_annotate_chunks_requires_items(services, started):
    is_error, body = call(services, "annotate_chunks", {"sessionId": started, "annotations": []})

    assert is_error
    assert body["type"] == "ValidationError"


def test_relation_progress_and_export(services, started):
    is_error, body = call(services, "add_relation", {
        "sessionId": started,
        "sourceChunkId": "c1",
        "targetChunkId": "c2",
        "relationType": "footnotes",
    })
    assert not is_error
    assert body["relationType"] == "footnotes"

    _, progress = call(services, "get_progress", {"sessionId": started})
    assert progress == {
        "totalChunks": 4,
        "annotatedChunks": 1,
        "pendingChunks": 3,
        "completionPercentage": 25.0,
        "pendingChunkIds": ["c0", "c2", "c3"],
    }

    _, export = call(services, "export_annotations", {"sessionId": started})
    assert [c["chunk_id"] for c in export["chunks"]] == ["c0", "c1", "c2", "c3"]
    assert export["chunks"][1]["relations"] == {"footnotes": ["c2"]}


def test_unknown_tool(services):
    is_error, body = call(services, "delete_everything", {})

    assert is_error
    assert body == {
        "type": "UnknownTool",
        "tool": "delete_everything",
        "message": "Unknown tool: delete_everything",
    }


def test_unexpected_exception_becomes_internal_error(services, started, monkeypatch):
    def boom(session_id):
        raise RuntimeError("store offline")

    monkeypatch.setattr(services.store, "get_progress", boom)
    is_error, body = call(services, "get_progress", {"sessionId": started})

    assert is_error
    assert body == {"type": "InternalError", "message": "store offline"}
