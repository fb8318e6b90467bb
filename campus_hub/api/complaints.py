from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..core.dependencies import DatabaseSession
from ..core.logging import SecurityLogger
from ..core.permissions import ADMINS, COMPLAINT_HANDLERS, require_roles
from ..models.complaint import Complaint
from ..models.enums import ComplaintStatus
from ..models.user import User
from ..schemas.complaint import (
    ComplaintRead,
    ComplaintResponseCreate,
    ComplaintResponseRead,
    ComplaintStatusUpdate,
    ComplaintSummary,
)
from ..schemas.user import UserSummary
from ..services.complaint_service import ComplaintService

router = APIRouter()

ComplaintHandler = Annotated[User, Depends(require_roles(COMPLAINT_HANDLERS))]
ComplaintAdmin = Annotated[User, Depends(require_roles(ADMINS))]


async def _get_complaint_or_404(
    complaint_service: ComplaintService, complaint_id: int
) -> Complaint:
    complaint = await complaint_service.get_complaint(complaint_id)
    if not complaint:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found"
        )
    return complaint


@router.get("/", response_model=list[ComplaintSummary])
async def list_complaints(
    db: DatabaseSession,
    _user: ComplaintHandler,
    status_filter: ComplaintStatus | None = Query(None, alias="status"),
):
    complaints = await ComplaintService(db).list_complaints(status_filter)
    return [ComplaintSummary.model_validate(c) for c in complaints]


@router.get("/{complaint_id}", response_model=ComplaintRead)
async def get_complaint(complaint_id: int, db: DatabaseSession, _user: ComplaintHandler):
    complaint = await _get_complaint_or_404(ComplaintService(db), complaint_id)
    return ComplaintRead.model_validate(complaint)


@router.post(
    "/{complaint_id}/responses",
    response_model=ComplaintResponseRead,
    status_code=status.HTTP_201_CREATED,
)
async def respond_to_complaint(
    request: Request,
    complaint_id: int,
    response_data: ComplaintResponseCreate,
    db: DatabaseSession,
    user: ComplaintHandler,
):
    complaint_service = ComplaintService(db)
    complaint = await _get_complaint_or_404(complaint_service, complaint_id)
    response = await complaint_service.add_response(
        complaint, response_data.message, user
    )

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=user.id,
        action="respond_to_complaint",
        target_id=complaint_id,
    )

    return ComplaintResponseRead(
        id=response.id,
        message=response.message,
        created_at=response.created_at,
        responder=UserSummary.model_validate(user),
    )


@router.put("/{complaint_id}/status", response_model=ComplaintRead)
async def update_complaint_status(
    request: Request,
    complaint_id: int,
    status_data: ComplaintStatusUpdate,
    db: DatabaseSession,
    user: ComplaintAdmin,
):
    complaint_service = ComplaintService(db)
    complaint = await _get_complaint_or_404(complaint_service, complaint_id)
    previous_status = complaint.status
    await complaint_service.update_status(complaint, status_data.status)

    SecurityLogger.log_admin_action(
        request,
        admin_user_id=user.id,
        action="update_complaint_status",
        target_id=complaint_id,
        details={"from": previous_status.value, "to": status_data.status.value},
    )

    complaint = await _get_complaint_or_404(complaint_service, complaint_id)
    return ComplaintRead.model_validate(complaint)
