"""Tests for agenda / suggestion id normalization."""
import uuid

from app.services.agenda_ids import (
    INVALID_FORMAT_ERROR,
    generate_deterministic_uuid,
    is_manifesto_format,
    is_raw_integer,
    is_valid_uuid,
    resolve_agenda_uuids,
    to_manifesto_format,
    validate_and_normalize_agenda_id,
    validate_suggestion_uuid,
)
from app.services.data_client import service_client


def test_format_predicates():
    assert is_valid_uuid(str(uuid.uuid4()))
    assert not is_valid_uuid("manifesto-1")
    assert is_manifesto_format("manifesto-12")
    assert not is_manifesto_format("manifesto-")
    assert is_raw_integer("42")
    assert not is_raw_integer("4.2")


def test_to_manifesto_format():
    assert to_manifesto_format("12") == "manifesto-12"
    assert to_manifesto_format(7) == "manifesto-7"
    assert to_manifesto_format("manifesto-3") == "manifesto-3"


def test_deterministic_uuid_is_stable_and_uuid_shaped():
    first = generate_deterministic_uuid("manifesto-1")
    assert first == generate_deterministic_uuid("manifesto-1")
    assert is_valid_uuid(first)
    assert first.split("-")[1] == "0001"
    assert first != generate_deterministic_uuid("manifesto-2")


def test_normalize_uuid_passes_through(db_session):
    value = str(uuid.uuid4())
    result = validate_and_normalize_agenda_id(service_client(db_session), value)
    assert result.is_valid
    assert result.agenda_uuid == value


def test_normalize_integer_uses_seeded_agenda(db_session, make_agenda):
    agenda = make_agenda(sequence_id=7)
    result = validate_and_normalize_agenda_id(service_client(db_session), "7")
    assert result.is_valid
    assert result.normalized_id == "manifesto-7"
    assert result.agenda_uuid == agenda.id


def test_normalize_unseeded_manifesto_id_is_deterministic(db_session):
    result = validate_and_normalize_agenda_id(service_client(db_session), "manifesto-9")
    assert result.is_valid
    assert result.agenda_uuid == generate_deterministic_uuid("manifesto-9")


def test_normalize_rejects_garbage(db_session):
    result = validate_and_normalize_agenda_id(service_client(db_session), "agenda-one")
    assert not result.is_valid
    assert result.agenda_uuid is None
    assert result.error == INVALID_FORMAT_ERROR


def test_resolve_agenda_uuids_bulk(db_session, make_agenda):
    agenda = make_agenda(sequence_id=3)
    raw_uuid = str(uuid.uuid4())
    resolved = resolve_agenda_uuids(service_client(db_session), ["3", "manifesto-4", raw_uuid, "bogus"])
    assert resolved["3"] == agenda.id
    assert resolved["manifesto-4"] == generate_deterministic_uuid("manifesto-4")
    assert resolved[raw_uuid] == raw_uuid
    assert resolved["bogus"] is None


def test_validate_suggestion_uuid(db_session, make_suggestion):
    client = service_client(db_session)
    bad = validate_suggestion_uuid(client, "123")
    assert not bad.is_valid and bad.error == "Invalid UUID format"

    missing = validate_suggestion_uuid(client, str(uuid.uuid4()))
    assert missing.is_valid and not missing.exists
    assert missing.error == "Suggestion not found"

    suggestion = make_suggestion(str(uuid.uuid4()))
    found = validate_suggestion_uuid(client, suggestion.id)
    assert found.is_valid and found.exists and found.error is None
