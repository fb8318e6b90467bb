from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..core.dependencies import DatabaseSession
from ..core.logging import SecurityLogger
from ..core.permissions import (
    EVENT_DETAIL_VIEWERS,
    EVENT_EDITORS,
    EVENT_VIEWERS,
    require_roles,
)
from ..models.event import Event
from ..models.user import User
from ..schemas.event import (
    EventCreate,
    EventRead,
    EventRegistrationDetail,
    EventUpdate,
)
from ..services.event_service import EventService
from ..services.registration_service import RegistrationService

router = APIRouter()

EventViewer = Annotated[User, Depends(require_roles(EVENT_VIEWERS))]
EventDetailViewer = Annotated[User, Depends(require_roles(EVENT_DETAIL_VIEWERS))]
EventEditor = Annotated[User, Depends(require_roles(EVENT_EDITORS))]


async def _get_event_or_404(event_service: EventService, event_id: int) -> Event:
    event = await event_service.get_event(event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


async def _event_read(db: DatabaseSession, event: Event) -> EventRead:
    registered_count = await RegistrationService(db).count_registrations(event.id)
    return EventRead.model_validate(event).model_copy(
        update={"registered_count": registered_count}
    )


@router.get("/", response_model=list[EventRead])
async def list_events(db: DatabaseSession, _user: EventViewer):
    events = await EventService(db).list_events_with_counts()
    return [
        EventRead.model_validate(event).model_copy(update={"registered_count": count})
        for event, count in events
    ]


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: int, db: DatabaseSession, _user: EventDetailViewer):
    event = await _get_event_or_404(EventService(db), event_id)
    return await _event_read(db, event)


@router.get("/{event_id}/registrations", response_model=list[EventRegistrationDetail])
async def list_event_registrations(
    event_id: int, db: DatabaseSession, _user: EventEditor
):
    event_service = EventService(db)
    await _get_event_or_404(event_service, event_id)
    registrations = await event_service.list_registrations(event_id)
    return [EventRegistrationDetail.model_validate(r) for r in registrations]


@router.post("/", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    request: Request, event_data: EventCreate, db: DatabaseSession, user: EventEditor
):
    event = await EventService(db).create_event(event_data, user)

    SecurityLogger.log_admin_action(
        request, admin_user_id=user.id, action="create_event", target_id=event.id
    )
    return await _event_read(db, event)


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    request: Request,
    event_id: int,
    event_data: EventUpdate,
    db: DatabaseSession,
    user: EventEditor,
):
    event_service = EventService(db)
    event = await _get_event_or_404(event_service, event_id)
    event = await event_service.update_event(event, event_data)

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=user.id,
        action="update_event",
        target_id=event.id,
        details={"fields": sorted(event_data.model_fields_set)},
    )
    return await _event_read(db, event)
