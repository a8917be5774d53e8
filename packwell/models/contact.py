"""Contact form models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field, computed_field

from .common import CamelModel, Pagination, RequestModel, utcnow
from .user import PHONE_PATTERN


class ContactSubject(str, Enum):
    GENERAL = "general"
    PRODUCT = "product"
    ORDER = "order"
    OTHER = "other"


class ContactStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Contact(CamelModel):
    """Contact form submission"""
    id: str
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    subject: ContactSubject
    message: str
    status: ContactStatus = ContactStatus.NEW
    admin_notes: Optional[str] = None
    response_message: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field(alias="fullName")
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ContactRequest(RequestModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(pattern=PHONE_PATTERN)
    subject: ContactSubject
    message: str = Field(min_length=1, max_length=1000)


class ContactStatusRequest(RequestModel):
    status: ContactStatus
    admin_notes: Optional[str] = Field(default=None, max_length=500)
    response_message: Optional[str] = Field(default=None, max_length=1000)


class ContactResponseRequest(RequestModel):
    response_message: str = Field(min_length=1, max_length=2000)


class ContactReceipt(CamelModel):
    id: str
    full_name: str
    email: str
    subject: ContactSubject
    status: ContactStatus
    created_at: datetime


class ContactData(CamelModel):
    contact: Contact


class ContactListData(CamelModel):
    contacts: list[Contact]
    pagination: Pagination
