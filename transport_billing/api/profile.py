"""
transport_billing/api/profile.py

Purpose: Profile, bank details and password

- Current user (refreshed through the session cache)
- Profile and bank updates adopt the returned user into the session
- Password change with confirmation check
"""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, validator

from transport_billing.api.deps import ensure_success, get_services, require_user
from transport_billing.core.exceptions import ValidationError
from transport_billing.core.logging import get_logger, LogContext
from transport_billing.schemas.user import BankDetails, Profile, User
from utils import constants as c
from utils.format_utils import format_gstin, mask_account_number
from utils.validation_utils import (
    validate_gstin,
    validate_ifsc,
    validate_pan,
    validate_password,
    validate_phone_number,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/profile")


class ProfileUpdate(Profile):
    @validator("mobile_number")
    def check_mobile(cls, v):
        if v and not validate_phone_number(v):
            raise ValueError("Please enter a valid 10-digit mobile number")
        return v

    @validator("gst_number")
    def check_gst(cls, v):
        if v and not validate_gstin(v):
            raise ValueError("Invalid GST number format")
        return v.strip().upper() if v else v

    @validator("pan_number")
    def check_pan(cls, v):
        if v and not validate_pan(v):
            raise ValueError("Invalid PAN number format")
        return v.strip().upper() if v else v


class BankUpdate(BankDetails):
    @validator("ifsc_code")
    def check_ifsc(cls, v):
        if v and not validate_ifsc(v):
            raise ValueError("Invalid IFSC code format")
        return v.strip().upper() if v else v


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")

    class Config:
        populate_by_name = True


def _profile_view(user: User) -> dict:
    bank = user.bank
    return {
        "user": user.to_storage(),
        "display": {
            "gst_number": format_gstin(user.profile.gst_number) if user.profile.gst_number else None,
            "account_number": mask_account_number(bank.account_number if bank else None),
        },
    }


@router.get("")
async def get_profile(request: Request, user: User = Depends(require_user)):
    refreshed = await get_services(request).session.refresh_user()
    return _profile_view(refreshed or user)


@router.put("")
async def update_profile(request: Request, form: ProfileUpdate, user: User = Depends(require_user)):
    services = get_services(request)
    with LogContext(user_id=user.id):
        response = await services.api.update_profile(user.id, form.model_dump(by_alias=True, exclude_none=True))
        ensure_success(response, c.PROFILE_UPDATE_FAILED_MESSAGE, require_data=True)
        services.session.apply_user(response.data)
        logger.info("Profile updated")
    return {"success": True, "message": c.PROFILE_UPDATED_MESSAGE, **_profile_view(response.data)}


@router.put("/bank")
async def update_bank_details(request: Request, form: BankUpdate, user: User = Depends(require_user)):
    services = get_services(request)
    with LogContext(user_id=user.id):
        response = await services.api.update_bank_details(user.id, form.model_dump(by_alias=True, exclude_none=True))
        ensure_success(response, c.BANK_UPDATE_FAILED_MESSAGE, require_data=True)
        services.session.apply_user(response.data)
        logger.info("Bank details updated")
    return {"success": True, "message": c.BANK_UPDATED_MESSAGE, **_profile_view(response.data)}


@router.put("/password")
async def change_password(request: Request, form: PasswordChange, user: User = Depends(require_user)):
    if form.new_password != form.confirm_password:
        raise ValidationError(c.PASSWORD_MISMATCH_MESSAGE)
    error = validate_password(form.new_password)
    if error:
        raise ValidationError(error)

    response = await get_services(request).api.change_password(form.current_password, form.new_password)
    ensure_success(response, c.PASSWORD_CHANGE_FAILED_MESSAGE)
    return {"success": True, "message": response.message or c.PASSWORD_CHANGED_MESSAGE}
