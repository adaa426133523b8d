import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.exceptions import NotFoundException, ValidationException
from app.models.agenda import Agenda
from app.models.profile import Profile
from app.schemas.agenda import AgendaOut, AgendaPage, Pagination
from app.schemas.vote import VoteRequest, VoteResult
from app.services.agenda_ids import validate_and_normalize_agenda_id
from app.services.auth import get_current_user
from app.services.data_client import DataClient, get_user_client
from app.services.voting import cast_vote

logger = logging.getLogger("app.agendas")

router = APIRouter(prefix="/api/agendas", tags=["Agendas"])

MAX_PAGE_SIZE = 100
LIST_CACHE = "public, s-maxage=60, stale-while-revalidate=300"


def _resolve(client: DataClient, agenda_id: str) -> str:
    resolution = validate_and_normalize_agenda_id(client, agenda_id)
    if not resolution.is_valid or not resolution.agenda_uuid:
        raise ValidationException(resolution.error or "Invalid agenda ID")
    return resolution.agenda_uuid


@router.get("", response_model=AgendaPage)
def list_agendas(
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    category: Optional[str] = Query(None),
    client: DataClient = Depends(get_user_client),
):
    """Paginated agendas, newest first."""
    limit = min(limit, MAX_PAGE_SIZE)
    query = client.query(Agenda)
    if category:
        query = query.filter(Agenda.category == category)

    total = query.count()
    rows = (
        query.order_by(Agenda.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    response.headers["Cache-Control"] = LIST_CACHE
    return AgendaPage(
        data=[AgendaOut.model_validate(row) for row in rows],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            totalPages=math.ceil(total / limit) if total else 0,
        ),
    )


@router.get("/{agenda_id}", response_model=AgendaOut)
def get_agenda(agenda_id: str, client: DataClient = Depends(get_user_client)):
    agenda_uuid = _resolve(client, agenda_id)
    agenda = client.get(Agenda, agenda_uuid)
    if agenda is None:
        raise NotFoundException("Agenda not found")
    return agenda


@router.post("/{agenda_id}/vote", response_model=VoteResult)
def vote_on_agenda(
    agenda_id: str,
    payload: VoteRequest,
    _user: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_user_client),
):
    """Toggle a like/dislike; votes for unseeded items land on their deterministic id."""
    return cast_vote(client, "agenda_votes", _resolve(client, agenda_id), payload.vote_type)
