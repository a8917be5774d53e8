"""User profile and address book routes"""

from fastapi import APIRouter, Depends

from ..database.users import user_db
from ..errors import NotFoundError
from ..models.common import ApiResponse
from ..models.user import (
    AddressListData,
    ProfileUpdateRequest,
    SavedAddressRequest,
    UserData,
)
from ..security.auth_middleware import Principal, require_user

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=ApiResponse[UserData])
async def get_profile(user: Principal = Depends(require_user)):
    return ApiResponse(data=UserData(user=user_db.get_user(user.user_id)))


@router.put("/profile", response_model=ApiResponse[UserData])
async def update_profile(request: ProfileUpdateRequest, user: Principal = Depends(require_user)):
    fields = request.model_dump(exclude_none=True)
    updated = user_db.update_user(user.user_id, **fields)
    return ApiResponse(message="Profile updated successfully", data=UserData(user=updated))


@router.get("/addresses", response_model=ApiResponse[AddressListData])
async def list_addresses(user: Principal = Depends(require_user)):
    account = user_db.get_user(user.user_id)
    return ApiResponse(data=AddressListData(addresses=account.addresses))


@router.post("/addresses", status_code=201, response_model=ApiResponse[AddressListData])
async def add_address(request: SavedAddressRequest, user: Principal = Depends(require_user)):
    account = user_db.add_address(user.user_id, **request.model_dump())
    return ApiResponse(
        message="Address added successfully",
        data=AddressListData(addresses=account.addresses),
    )


@router.put("/addresses/{address_id}", response_model=ApiResponse[AddressListData])
async def update_address(
    address_id: str,
    request: SavedAddressRequest,
    user: Principal = Depends(require_user),
):
    account = user_db.update_address(user.user_id, address_id, **request.model_dump())
    if not account:
        raise NotFoundError("Address")
    return ApiResponse(
        message="Address updated successfully",
        data=AddressListData(addresses=account.addresses),
    )


@router.delete("/addresses/{address_id}", response_model=ApiResponse[AddressListData])
async def delete_address(address_id: str, user: Principal = Depends(require_user)):
    account = user_db.delete_address(user.user_id, address_id)
    if not account:
        raise NotFoundError("Address")
    return ApiResponse(
        message="Address deleted successfully",
        data=AddressListData(addresses=account.addresses),
    )


@router.put("/addresses/{address_id}/default", response_model=ApiResponse[AddressListData])
async def set_default_address(address_id: str, user: Principal = Depends(require_user)):
    account = user_db.set_default_address(user.user_id, address_id)
    if not account:
        raise NotFoundError("Address")
    return ApiResponse(
        message="Default address updated successfully",
        data=AddressListData(addresses=account.addresses),
    )
