import logging
from collections.abc import Callable
from datetime import datetime
from typing import TypedDict

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    AlreadyRegisteredError,
    DeadlinePassedError,
    EventFullError,
    EventNotFoundError,
)
from ..database import transaction
from ..models.enums import EventStatus
from ..models.event import Event, EventRegistration
from ..utils.datetime_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class EventCapacityInfo(TypedDict):
    has_capacity_limit: bool
    max_attendees: int | None
    registered_count: int
    available_spots: int | None
    is_full: bool


def has_capacity_limit(event: Event) -> bool:
    return bool(event.max_attendees and event.max_attendees > 0)


class RegistrationService:
    """Admission control for event registrations.

    Every attempt runs in a single transaction that first takes an exclusive
    lock on the event row, so the count-then-insert below cannot overshoot
    ``max_attendees`` when requests for the same event race. Checks run in a
    fixed order and the first violation wins:

    1. event exists and is published
    2. registration deadline not passed
    3. user not already registered
    4. capacity left
    """

    db: AsyncSession

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    async def register(self, event_id: int, user_id: int) -> EventRegistration:
        async with transaction(self.db):
            result = await self.db.execute(
                select(Event).where(Event.id == event_id).with_for_update()
            )
            event = result.scalar_one_or_none()

            if not event or event.status != EventStatus.PUBLISHED:
                raise EventNotFoundError()

            if self.clock() > ensure_utc(event.registration_deadline):
                raise DeadlinePassedError()

            existing = await self.db.execute(
                select(EventRegistration.id).where(
                    EventRegistration.event_id == event_id,
                    EventRegistration.user_id == user_id,
                )
            )
            if existing.scalar_one_or_none() is not None:
                raise AlreadyRegisteredError()

            if has_capacity_limit(event):
                registered_count = await self.count_registrations(event_id)
                if registered_count >= event.max_attendees:  # type: ignore[operator]
                    raise EventFullError()

            registration = EventRegistration(
                event_id=event_id, user_id=user_id, registration_time=self.clock()
            )
            self.db.add(registration)
            try:
                await self.db.flush()
            except IntegrityError as e:
                raise AlreadyRegisteredError() from e

        logger.info(f"User {user_id} registered for event {event_id}")
        return registration

    async def count_registrations(self, event_id: int) -> int:
        result = await self.db.execute(
            select(func.count(EventRegistration.id)).where(
                EventRegistration.event_id == event_id
            )
        )
        return result.scalar() or 0

    async def is_registered(self, event_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(EventRegistration.id).where(
                EventRegistration.event_id == event_id,
                EventRegistration.user_id == user_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def get_capacity_info(self, event: Event) -> EventCapacityInfo:
        registered_count = await self.count_registrations(event.id)

        if not has_capacity_limit(event):
            return {
                "has_capacity_limit": False,
                "max_attendees": None,
                "registered_count": registered_count,
                "available_spots": None,
                "is_full": False,
            }

        max_attendees = event.max_attendees or 0
        return {
            "has_capacity_limit": True,
            "max_attendees": max_attendees,
            "registered_count": registered_count,
            "available_spots": max(0, max_attendees - registered_count),
            "is_full": registered_count >= max_attendees,
        }
