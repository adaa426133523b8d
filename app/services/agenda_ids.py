"""Agenda and suggestion identifier helpers.

Agendas are addressed three ways: a UUID, a bare manifesto number
(``"12"``) or ``"manifesto-12"``. Numbers resolve through
``Agenda.sequence_id``; when no row exists yet a deterministic UUID is
derived from the manifesto id so the same item maps to the same key on
every request.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.models.agenda import Agenda
from app.models.suggestion import Suggestion

logger = logging.getLogger("app.agenda_ids")

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_MANIFESTO_RE = re.compile(r"^manifesto-\d+$")
_RAW_INT_RE = re.compile(r"^\d+$")

MANIFESTO_PREFIX = "manifesto-"
INVALID_FORMAT_ERROR = "Invalid ID format. Expected UUID, integer, or manifesto-{number} format."


@dataclass
class AgendaIdResolution:
    is_valid: bool
    normalized_id: str
    agenda_uuid: Optional[str]
    error: Optional[str] = None


@dataclass
class SuggestionIdCheck:
    is_valid: bool
    exists: bool
    error: Optional[str] = None


def is_valid_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


def is_manifesto_format(value: str) -> bool:
    return bool(_MANIFESTO_RE.match(value))


def is_raw_integer(value: str) -> bool:
    return bool(_RAW_INT_RE.match(value))


def to_manifesto_format(value) -> str:
    value = str(value)
    if is_raw_integer(value):
        return f"{MANIFESTO_PREFIX}{value}"
    return value


def _int32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def generate_deterministic_uuid(manifesto_id: str) -> str:
    """UUID-shaped key derived only from ``manifesto_id``.

    Not collision resistant; it is a lookup key for agendas that have not
    been seeded yet.
    """
    seed = f"agenda-{manifesto_id}"
    h = 0
    for ch in seed:
        h = _int32((h << 5) - h + ord(ch))

    hex_part = format(abs(h), "x").rjust(8, "0")
    number = manifesto_id.replace(MANIFESTO_PREFIX, "", 1).rjust(4, "0")
    variant_tail = hex_part[8:11] or "000"
    node = hex_part[:12].ljust(12, "0")
    return f"{hex_part[:8]}-{number}-4000-8{variant_tail}-{node}"


def get_or_create_agenda_uuid(client, manifesto_id: str) -> Optional[str]:
    """Agenda UUID for ``manifesto-<n>``: the seeded row's id, else the deterministic one."""
    try:
        number = int(manifesto_id.replace(MANIFESTO_PREFIX, "", 1))
        existing = client.query(Agenda).filter(Agenda.sequence_id == number).first()
        if existing:
            logger.debug(f"Found agenda {existing.id} for {manifesto_id}")
            return existing.id

        generated = generate_deterministic_uuid(manifesto_id)
        logger.debug(f"Generated deterministic agenda id {generated} for {manifesto_id}")
        return generated
    except (SQLAlchemyError, ValueError) as e:
        logger.error(f"Error resolving agenda id for {manifesto_id}: {e}")
        return None


def validate_and_normalize_agenda_id(client, raw_id) -> AgendaIdResolution:
    raw_id = str(raw_id).strip()
    if is_valid_uuid(raw_id):
        return AgendaIdResolution(True, raw_id, raw_id)
    if is_raw_integer(raw_id):
        normalized = to_manifesto_format(raw_id)
        return AgendaIdResolution(True, normalized, get_or_create_agenda_uuid(client, normalized))
    if is_manifesto_format(raw_id):
        return AgendaIdResolution(True, raw_id, get_or_create_agenda_uuid(client, raw_id))
    return AgendaIdResolution(False, raw_id, None, INVALID_FORMAT_ERROR)


def resolve_agenda_uuids(client, raw_ids) -> dict[str, Optional[str]]:
    """Bulk form of :func:`validate_and_normalize_agenda_id`; one query for all numbers."""
    resolved: dict[str, Optional[str]] = {}
    numbers: dict[str, int] = {}
    for raw in raw_ids:
        raw = str(raw).strip()
        if is_valid_uuid(raw):
            resolved[raw] = raw
        elif is_raw_integer(raw) or is_manifesto_format(raw):
            numbers[raw] = int(to_manifesto_format(raw).replace(MANIFESTO_PREFIX, "", 1))
        else:
            resolved[raw] = None

    if numbers:
        try:
            rows = (
                client.query(Agenda, Agenda.sequence_id, Agenda.id)
                .filter(Agenda.sequence_id.in_(set(numbers.values())))
                .all()
            )
            seeded = {seq: agenda_id for seq, agenda_id in rows}
        except SQLAlchemyError as e:
            logger.error(f"Error resolving agenda ids in bulk: {e}")
            return {**resolved, **{raw: None for raw in numbers}}
        for raw, number in numbers.items():
            resolved[raw] = seeded.get(number) or generate_deterministic_uuid(to_manifesto_format(raw))
    return resolved


def validate_suggestion_uuid(client, suggestion_id: str) -> SuggestionIdCheck:
    if not is_valid_uuid(suggestion_id):
        return SuggestionIdCheck(False, False, "Invalid UUID format")
    try:
        exists = client.query(Suggestion, Suggestion.id).filter(Suggestion.id == suggestion_id).first() is not None
    except SQLAlchemyError as e:
        logger.error(f"Error validating suggestion {suggestion_id}: {e}")
        return SuggestionIdCheck(True, False, "Failed to validate suggestion")
    return SuggestionIdCheck(True, exists, None if exists else "Suggestion not found")
