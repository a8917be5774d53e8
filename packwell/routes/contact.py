"""Contact form API routes"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from ..database.contacts import contact_db
from ..errors import NotFoundError
from ..models.common import ApiResponse, paginate, utcnow
from ..models.contact import (
    ContactData,
    ContactListData,
    ContactReceipt,
    ContactRequest,
    ContactResponseRequest,
    ContactStatus,
    ContactStatusRequest,
)
from ..security.auth_middleware import Principal, require_admin
from ..services.notifications import (
    NotificationDispatcher,
    get_dispatcher,
    notify_contact_received,
    notify_contact_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["Contact"])

NOT_FOUND = "Contact submission not found"


@router.post("", status_code=201, response_model=ApiResponse[ContactReceipt])
async def submit_contact(
    request: ContactRequest,
    background_tasks: BackgroundTasks,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Store a contact form submission and acknowledge it by email"""
    contact = contact_db.create_contact(**dict(request))
    notify_contact_received(contact)
    background_tasks.add_task(dispatcher.flush)
    logger.info(f"Contact submission {contact.id} received ({contact.subject.value})")
    return ApiResponse(
        message="Thank you for your message! We will get back to you soon.",
        data=ContactReceipt(
            id=contact.id,
            full_name=contact.full_name,
            email=contact.email,
            subject=contact.subject,
            status=contact.status,
            created_at=contact.created_at,
        ),
    )


@router.get("", response_model=ApiResponse[ContactListData])
async def list_contacts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[ContactStatus] = None,
    search: Optional[str] = None,
    admin: Principal = Depends(require_admin),
):
    results = contact_db.list_contacts(status=status, search=search)
    contacts, pagination = paginate(results, page, limit)
    return ApiResponse(data=ContactListData(contacts=contacts, pagination=pagination))


@router.get("/{contact_id}", response_model=ApiResponse[ContactData])
async def get_contact(contact_id: str, admin: Principal = Depends(require_admin)):
    contact = contact_db.get_contact(contact_id)
    if not contact:
        raise NotFoundError("Contact", NOT_FOUND)
    return ApiResponse(data=ContactData(contact=contact))


@router.put("/{contact_id}/status", response_model=ApiResponse[ContactData])
async def update_contact_status(
    contact_id: str,
    request: ContactStatusRequest,
    admin: Principal = Depends(require_admin),
):
    fields = {"status": request.status}
    if request.admin_notes is not None:
        fields["admin_notes"] = request.admin_notes
    if request.response_message:
        fields["response_message"] = request.response_message
        fields["responded_at"] = utcnow()

    contact = contact_db.update_contact(contact_id, **fields)
    if not contact:
        raise NotFoundError("Contact", NOT_FOUND)
    return ApiResponse(message="Contact status updated successfully", data=ContactData(contact=contact))


@router.delete("/{contact_id}", response_model=ApiResponse[None])
async def delete_contact(contact_id: str, admin: Principal = Depends(require_admin)):
    if not contact_db.delete_contact(contact_id):
        raise NotFoundError("Contact", NOT_FOUND)
    return ApiResponse(message="Contact submission deleted successfully")


@router.post("/{contact_id}/send-response", response_model=ApiResponse[ContactData])
async def send_contact_response(
    contact_id: str,
    request: ContactResponseRequest,
    background_tasks: BackgroundTasks,
    admin: Principal = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Email a reply to the sender and mark the submission resolved"""
    contact = contact_db.update_contact(
        contact_id,
        status=ContactStatus.RESOLVED,
        response_message=request.response_message,
        responded_at=utcnow(),
    )
    if not contact:
        raise NotFoundError("Contact", NOT_FOUND)

    notify_contact_response(contact)
    background_tasks.add_task(dispatcher.flush)
    logger.info(f"Response to contact {contact_id} queued by {admin.user_id}")
    return ApiResponse(message="Response email queued successfully", data=ContactData(contact=contact))
