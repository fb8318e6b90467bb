from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database import transaction
from ..models.complaint import Complaint, ComplaintResponse
from ..models.enums import ComplaintStatus
from ..models.user import User
from ..schemas.complaint import ComplaintCreate


class ComplaintService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_complaint(
        self, complaint_data: ComplaintCreate, user: User
    ) -> Complaint:
        async with transaction(self.db):
            complaint = Complaint(
                title=complaint_data.title,
                category=complaint_data.category,
                description=complaint_data.description,
                phone_number=complaint_data.phone_number or user.phone_number,
                status=ComplaintStatus.RECEIVED,
                user_id=user.id,
            )
            self.db.add(complaint)
            await self.db.flush()
        return complaint

    async def list_complaints(
        self, status_filter: ComplaintStatus | None = None
    ) -> list[Complaint]:
        query = select(Complaint).order_by(
            Complaint.created_at.desc(), Complaint.id.desc()
        )
        if status_filter:
            query = query.where(Complaint.status == status_filter)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_complaint(self, complaint_id: int) -> Complaint | None:
        result = await self.db.execute(
            select(Complaint)
            .where(Complaint.id == complaint_id)
            .options(
                selectinload(Complaint.user),
                selectinload(Complaint.responses).selectinload(
                    ComplaintResponse.responder
                ),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_response(
        self, complaint: Complaint, message: str, responder: User
    ) -> ComplaintResponse:
        async with transaction(self.db):
            response = ComplaintResponse(
                complaint_id=complaint.id, message=message, responder_id=responder.id
            )
            self.db.add(response)
            await self.db.flush()
        return response

    async def update_status(
        self, complaint: Complaint, new_status: ComplaintStatus
    ) -> Complaint:
        async with transaction(self.db):
            complaint.status = new_status
        return complaint
