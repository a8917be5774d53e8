"""User and address models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel, Pagination, RequestModel, utcnow

PHONE_PATTERN = r"^[6-9]\d{9}$"
PINCODE_PATTERN = r"^\d{6}$"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Address(CamelModel):
    """Saved delivery address"""
    id: str
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    is_default: bool = False


class User(CamelModel):
    """Store customer or administrator"""
    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    addresses: list[Address] = []
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserSummary(CamelModel):
    """Customer fields shown next to orders and reviews"""
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class AddressRequest(RequestModel):
    """Address fields shared by saved addresses and checkout"""
    name: str = Field(min_length=2, max_length=50)
    phone: str = Field(pattern=PHONE_PATTERN)
    address: str = Field(min_length=10, max_length=200)
    city: str = Field(min_length=2, max_length=50)
    state: str = Field(min_length=2, max_length=50)
    pincode: str = Field(pattern=PINCODE_PATTERN)


class SavedAddressRequest(AddressRequest):
    is_default: bool = False


class ProfileUpdateRequest(RequestModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)


class UserStatusRequest(RequestModel):
    is_active: bool


class UserData(CamelModel):
    user: User


class UserListData(CamelModel):
    users: list[User]
    pagination: Pagination


class AddressListData(CamelModel):
    addresses: list[Address]

