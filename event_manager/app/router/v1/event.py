from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.utils.consts import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    EventFilter,
    EventType,
    JoinStatus,
    UserRole,
)
from event_manager.app.common.utils.dependency import (
    get_event_service,
    get_participant_service,
    get_session,
    require_roles,
)
from event_manager.app.v1.auth.schema.responseDto import MessageResponse
from event_manager.app.v1.event.schema.requestDto import EventCreateRequest, EventUpdateRequest
from event_manager.app.v1.event.schema.responseDto import EventListResponse, EventResponse
from event_manager.app.v1.event.service.event_service import EventService
from event_manager.app.v1.participant.schema.responseDto import ParticipantDetailResponse
from event_manager.app.v1.participant.service.participant_service import ParticipantService
from event_manager.app.v1.user.entity.user import User

router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    payload: EventCreateRequest,
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.create_event(session, current_user, payload.model_dump())


@router.get("", response_model=EventListResponse)
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    filter_by: EventFilter | None = Query(None, alias="filter"),
    search: str | None = Query(None),
    event_type: EventType | None = Query(None, alias="type"),
    session: AsyncSession = Depends(get_session),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.list_events(
        session, page=page, limit=limit, filter_by=filter_by, search=search, event_type=event_type
    )


# registered before /{event_id} so "mine" is not parsed as an id
@router.get("/mine", response_model=EventListResponse)
async def list_my_events(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    filter_by: EventFilter | None = Query(None, alias="filter"),
    search: str | None = Query(None),
    event_type: EventType | None = Query(None, alias="type"),
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.list_my_events(
        session,
        organizer_id=current_user.id,
        page=page,
        limit=limit,
        filter_by=filter_by,
        search=search,
        event_type=event_type,
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    session: AsyncSession = Depends(get_session),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.get_event(session, event_id)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    payload: EventUpdateRequest,
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.update_event(session, current_user.id, event_id, payload.model_dump(exclude_unset=True))


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int,
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    event_service: EventService = Depends(get_event_service),
):
    await event_service.delete_event(session, current_user.id, event_id)
    return {"message": "Event deleted successfully"}


@router.get("/{event_id}/participants", response_model=list[ParticipantDetailResponse])
async def list_event_participants(
    event_id: int,
    status: JoinStatus | None = Query(None),
    current_user: User = Depends(require_roles(UserRole.ORGANIZER)),
    session: AsyncSession = Depends(get_session),
    participant_service: ParticipantService = Depends(get_participant_service),
):
    return await participant_service.list_for_event(session, current_user.id, event_id, status=status)
