import pytest

from annotation_mcp_server.annotation.models import AnnotateChunkInput


def annotate(service, session_id, chunk_id, **fields):
    return service.annotate_chunk(session_id, AnnotateChunkInput(chunk_id=chunk_id, **fields))


def stored(store, session_id, chunk_id):
    return store.get(session_id).data.annotations.get(chunk_id)


# ---------------------------------------------------------------------
# chunk_id derivation
# ---------------------------------------------------------------------

def test_display_id_from_category_and_label(service, store, session_id):
    result = annotate(
        service, session_id, "c1",
        categories=["fee_schedule"],
        labels=["Fee Schedule"],
    )

    assert result.success
    assert result.data.chunk_id == "2_fee_schedule_Fee Schedule"
    assert result.data.position == 2
    # Keyed by the original chunk id, not the display id
    assert stored(store, session_id, "c1") == result.data
    assert stored(store, session_id, "2_fee_schedule_Fee Schedule") is None


def test_display_id_falls_back_to_original(service, session_id):
    result = annotate(service, session_id, "c1", notes="needs review")

    assert result.success
    assert result.data.chunk_id == "c1"
    assert result.data.notes == "needs review"


def test_display_id_needs_both_category_and_label(service, session_id):
    result = annotate(service, session_id, "c1", categories=["footnotes"])
    assert result.data.chunk_id == "c1"


def test_display_id_uses_first_values(service, session_id):
    result = annotate(
        service, session_id, "c3",
        categories=["footnotes", "fee_schedule"],
        labels=["Footnotes", "Fee Schedule"],
    )
    assert result.data.chunk_id == "4_footnotes_Footnotes"


def test_display_id_recomputed_from_merged_values(service, session_id):
    annotate(service, session_id, "c1", categories=["fee_schedule"])
    result = annotate(service, session_id, "c1", labels=["Fee Schedule"])

    assert result.data.categories == ["fee_schedule"]
    assert result.data.chunk_id == "2_fee_schedule_Fee Schedule"


# ---------------------------------------------------------------------
# Merge policy
# ---------------------------------------------------------------------

def test_same_payload_twice_is_idempotent(service, session_id):
    fields = dict(
        categories=["fee_schedule"],
        labels=["Fee Schedule"],
        subtypes={"fee_schedule": "participant_fee"},
        keywords=["fee"],
        tags=["table"],
        notes="n",
        summary="s",
    )
    first = annotate(service, session_id, "c1", **fields)
    second = annotate(service, session_id, "c1", **fields)

    assert first.data == second.data


def test_notes_only_leaves_other_fields(service, relations, store, session_id):
    annotate(
        service, session_id, "c1",
        categories=["fee_schedule"],
        labels=["Fee Schedule"],
        subtypes={"fee_schedule": "participant_fee"},
        keywords=["fee"],
        tags=["table"],
        summary="Participant fees",
    )
    relations.add_relation(session_id, "c1", "c2", "footnotes")
    before = stored(store, session_id, "c1")

    result = annotate(service, session_id, "c1", notes="checked")

    assert result.data.notes == "checked"
    assert result.data.model_dump(exclude={"notes"}) == before.model_dump(exclude={"notes"})


def test_empty_categories_keep_existing(service, session_id):
    annotate(service, session_id, "c1", categories=["fee_schedule"], labels=["Fee Schedule"])
    result = annotate(service, session_id, "c1", categories=[], labels=[], subtypes={})

    assert result.data.categories == ["fee_schedule"]
    assert result.data.labels == ["Fee Schedule"]


def test_new_categories_replace_wholesale(service, session_id):
    annotate(
        service, session_id, "c1",
        categories=["fee_schedule"],
        subtypes={"fee_schedule": "participant_fee"},
    )
    result = annotate(service, session_id, "c1", categories=["footnotes"])

    assert result.data.categories == ["footnotes"]
    # Subtypes were not supplied, so the stored mapping is kept as-is
    assert result.data.subtypes == {"fee_schedule": "participant_fee"}


def test_explicit_empty_values_override(service, session_id):
    annotate(service, session_id, "c1", tags=["a"], keywords=["k"], notes="n", summary="s")
    result = annotate(service, session_id, "c1", tags=[], keywords=[], notes="", summary="")

    assert result.data.tags == []
    assert result.data.keywords == []
    assert result.data.notes == ""
    assert result.data.summary == ""


def test_relations_carried_forward(service, relations, session_id):
    relations.add_relation(session_id, "c1", "c2", "references")
    result = annotate(service, session_id, "c1", categories=["fee_schedule"])

    assert result.data.relations == {"references": ["c2"]}


def test_repeated_categories_kept(service, session_id):
    result = annotate(service, session_id, "c0", categories=["footnotes", "footnotes"])
    assert result.data.categories == ["footnotes", "footnotes"]


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------

def test_subtype_requires_category_in_same_call(service, session_id):
    annotate(service, session_id, "c1", categories=["fee_schedule"])
    result = annotate(service, session_id, "c1", subtypes={"fee_schedule": "participant_fee"})

    assert not result.success
    assert result.error.type == "SubtypeCategoryMismatch"
    assert result.error.category == "fee_schedule"
    assert result.error.subtype == "participant_fee"


def test_subtype_with_category(service, session_id):
    result = annotate(
        service, session_id, "c2",
        categories=["footnotes"],
        subtypes={"footnotes": "reference"},
    )
    assert result.data.subtypes == {"footnotes": "reference"}


def test_invalid_subtype_lists_category_options(service, session_id):
    result = annotate(
        service, session_id, "c1",
        categories=["fee_schedule"],
        subtypes={"fee_schedule": "reference"},
    )

    assert result.error.type == "InvalidSubtype"
    assert result.error.category == "fee_schedule"
    assert result.error.valid_options == [
        "participant_fee",
        "legal_regulatory_fee",
        "port_fees_and_other_services",
        "market_data_fees",
        "fees_and_rebates",
    ]


def test_invalid_subtype_category_key(service, session_id):
    result = annotate(
        service, session_id, "c1",
        categories=["fee_schedule"],
        subtypes={"invoices": "participant_fee"},
    )
    assert result.error.type == "InvalidCategory"
    assert result.error.category == "invoices"


def test_first_invalid_category_reported(service, session_id):
    result = annotate(service, session_id, "c1", categories=["fee_schedule", "bogus", "worse"])
    assert result.error.type == "InvalidCategory"
    assert result.error.category == "bogus"


def test_categories_validated_before_labels(service, session_id):
    result = annotate(service, session_id, "c1", categories=["bogus"], labels=["Bogus"])
    assert result.error.category == "bogus"


def test_invalid_label(service, session_id):
    result = annotate(service, session_id, "c1", labels=["Fee schedule"])

    assert result.error.type == "InvalidCategory"
    assert result.error.valid_options == ["Fee Schedule", "Footnotes"]
    assert "Invalid label" in result.error.message


def test_unknown_chunk(service, session_id):
    result = annotate(service, session_id, "c9", notes="x")

    assert result.error.type == "ChunkNotFound"
    assert result.error.chunk_id == "c9"


def test_unknown_session_reported_as_chunk_not_found(service):
    result = annotate(service, "no-such-session", "c1", notes="x")

    assert result.error.type == "ChunkNotFound"
    assert result.error.chunk_id == "c1"
    assert "Session not found" in result.error.message


@pytest.mark.parametrize(
    "fields",
    [
        {"categories": ["bogus"], "notes": "changed"},
        {"labels": ["bogus"], "notes": "changed"},
        {"subtypes": {"fee_schedule": "participant_fee"}, "notes": "changed"},
    ],
)
def test_failed_call_writes_nothing(service, store, session_id, fields):
    annotate(service, session_id, "c1", notes="original")
    result = annotate(service, session_id, "c1", **fields)

    assert not result.success
    assert stored(store, session_id, "c1").notes == "original"
    assert stored(store, session_id, "c0") is None


# ---------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------

def test_export_one_record_per_chunk(service, session_id):
    annotate(service, session_id, "c2", categories=["footnotes"], labels=["Footnotes"])

    chunks = service.export_annotations(session_id).data.chunks

    assert [c.chunk_id for c in chunks] == ["c0", "c1", "3_footnotes_Footnotes", "c3"]
    assert [c.position for c in chunks] == [0, 2, 3, 4]

    placeholder = chunks[0]
    assert placeholder.categories == []
    assert placeholder.labels == []
    assert placeholder.subtypes == {}
    assert placeholder.keywords == []
    assert placeholder.tags == []
    assert placeholder.relations == {}
    assert placeholder.notes == ""
    assert placeholder.summary == ""


def test_export_unknown_session(service):
    result = service.export_annotations("missing")

    assert result.error.type == "ChunkNotFound"
    assert result.error.chunk_id == ""


# ---------------------------------------------------------------------
# Returned records are copies
# ---------------------------------------------------------------------

def test_mutating_annotate_result_leaves_store_alone(service, store, session_id):
    result = annotate(service, session_id, "c1", categories=["footnotes"], tags=["t"])

    result.data.categories.append("bogus")
    result.data.tags.clear()

    kept = stored(store, session_id, "c1")
    assert kept.categories == ["footnotes"]
    assert kept.tags == ["t"]


def test_mutating_export_leaves_store_alone(service, relations, store, session_id):
    annotate(service, session_id, "c1", notes="n")
    relations.add_relation(session_id, "c1", "c2", "references")

    exported = service.export_annotations(session_id).data.chunks[1]
    exported.tags.append("leak")
    exported.relations["references"].append("c3")

    kept = stored(store, session_id, "c1")
    assert kept.tags == []
    assert kept.relations == {"references": ["c2"]}
