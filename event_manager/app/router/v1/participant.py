from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.utils.consts import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, JoinStatus, UserRole
from event_manager.app.common.utils.dependency import get_participant_service, get_session, require_roles
from event_manager.app.v1.auth.schema.responseDto import MessageResponse
from event_manager.app.v1.participant.schema.requestDto import JoinEventRequest, UpdateParticipantStatusRequest
from event_manager.app.v1.participant.schema.responseDto import (
    ParticipantListResponse,
    ParticipantResponse,
    ParticipantStatusResponse,
)
from event_manager.app.v1.participant.service.participant_service import ParticipantService
from event_manager.app.v1.user.entity.user import User

router = APIRouter(prefix="/participants", tags=["Participants"])


@router.post("/join", response_model=ParticipantResponse, status_code=201)
async def join_event(
    payload: JoinEventRequest,
    current_user: User = Depends(require_roles(UserRole.PARTICIPANT)),
    session: AsyncSession = Depends(get_session),
    participant_service: ParticipantService = Depends(get_participant_service),
):
    return await participant_service.request_join(session, current_user.id, payload.event_id)


@router.put("/{participant_id}/status", response_model=ParticipantStatusResponse)
async def update_participant_status(
    participant_id: int,
    payload: UpdateParticipantStatusRequest,
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    participant_service: ParticipantService = Depends(get_participant_service),
):
    new_status = JoinStatus(payload.status)
    participant = await participant_service.decide(session, current_user.id, participant_id, new_status)
    return {"data": participant, "message": f"Participant {new_status.value.lower()} successfully"}


@router.delete("/{participant_id}", response_model=MessageResponse)
async def cancel_request(
    participant_id: int,
    current_user: User = Depends(require_roles(UserRole.PARTICIPANT)),
    session: AsyncSession = Depends(get_session),
    participant_service: ParticipantService = Depends(get_participant_service),
):
    await participant_service.cancel(session, current_user.id, participant_id)
    return {"message": "Join request cancelled"}


@router.get("/my-requests", response_model=ParticipantListResponse)
async def list_my_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: JoinStatus | None = Query(None),
    current_user: User = Depends(require_roles(UserRole.PARTICIPANT)),
    session: AsyncSession = Depends(get_session),
    participant_service: ParticipantService = Depends(get_participant_service),
):
    return await participant_service.list_my_requests(session, current_user.id, page=page, limit=limit, status=status)


@router.get("/related/organizer", response_model=ParticipantListResponse)
async def list_organizer_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: JoinStatus | None = Query(None),
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    participant_service: ParticipantService = Depends(get_participant_service),
):
    return await participant_service.list_for_organizer(session, current_user.id, page=page, limit=limit, status=status)
