from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import InvalidInputError
from ..database import transaction
from ..models.enums import EventStatus
from ..models.event import Event, EventRegistration
from ..models.user import User
from ..schemas.event import EventCreate, EventUpdate
from ..utils.datetime_utils import ensure_utc


def registered_count_column():
    return (
        select(func.count(EventRegistration.id))
        .where(EventRegistration.event_id == Event.id)
        .correlate(Event)
        .scalar_subquery()
    )


class EventService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_events_with_counts(
        self, published_only: bool = False, limit: int | None = None
    ) -> list[tuple[Event, int]]:
        query = select(Event, registered_count_column()).order_by(
            Event.start_time.desc(), Event.id.desc()
        )
        if published_only:
            query = query.where(Event.status == EventStatus.PUBLISHED)
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [(event, count or 0) for event, count in result.all()]

    async def get_event(self, event_id: int) -> Event | None:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        return result.scalar_one_or_none()

    async def create_event(self, event_data: EventCreate, organizer: User) -> Event:
        async with transaction(self.db):
            event = Event(**event_data.model_dump(), organizer_id=organizer.id)
            self.db.add(event)
            await self.db.flush()
        return event

    async def update_event(self, event: Event, event_data: EventUpdate) -> Event:
        update_data = event_data.model_dump(exclude_unset=True)
        for field in ("title", "start_time", "registration_deadline", "status"):
            if field in update_data and update_data[field] is None:
                raise InvalidInputError(f"{field} cannot be null")

        start = ensure_utc(update_data.get("start_time", event.start_time))
        deadline = ensure_utc(
            update_data.get("registration_deadline", event.registration_deadline)
        )
        end = update_data.get("end_time", event.end_time)

        if deadline > start:
            raise InvalidInputError(
                "Registration deadline cannot be after the event starts"
            )
        if end is not None and ensure_utc(end) <= start:
            raise InvalidInputError("End time must be after start time")

        async with transaction(self.db):
            for field, value in update_data.items():
                setattr(event, field, value)
        return event

    async def list_registrations(self, event_id: int) -> list[EventRegistration]:
        result = await self.db.execute(
            select(EventRegistration)
            .where(EventRegistration.event_id == event_id)
            .options(selectinload(EventRegistration.user))
            .order_by(EventRegistration.registration_time, EventRegistration.id)
        )
        return list(result.scalars().all())

    async def registered_event_ids(self, user_id: int) -> set[int]:
        result = await self.db.execute(
            select(EventRegistration.event_id).where(
                EventRegistration.user_id == user_id
            )
        )
        return set(result.scalars().all())
