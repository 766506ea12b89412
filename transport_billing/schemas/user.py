"""
transport_billing/schemas/user.py

Purpose: User and auth payload schemas

- Business profile and optional bank details
- Cached user snapshot (serialized to local storage)
- Login / register requests and the auth response carrying the token
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, validator

from utils.validation_utils import (
    validate_email,
    validate_gstin,
    validate_ifsc,
    validate_pan,
    validate_password,
    validate_phone_number,
)


class Profile(BaseModel):
    owner_name: str = Field("", alias="ownerName")
    company_name: str = Field("", alias="companyName")
    mobile_number: str = Field("", alias="mobileNumber")
    address: str = ""
    gst_number: Optional[str] = Field(None, alias="gstNumber")
    pan_number: Optional[str] = Field(None, alias="panNumber")

    class Config:
        populate_by_name = True


class BankDetails(BaseModel):
    bank_name: Optional[str] = Field(None, alias="bankName")
    account_holder_name: Optional[str] = Field(None, alias="accountHolderName")
    account_number: Optional[str] = Field(None, alias="accountNumber")
    ifsc_code: Optional[str] = Field(None, alias="ifscCode")
    bank_branch_name: Optional[str] = Field(None, alias="bankBranchName")

    class Config:
        populate_by_name = True


class User(BaseModel):
    """
    User as returned by /api/auth/me and cached locally.
    """
    id: str
    uniqueid: Optional[str] = None
    email: str
    profile: Profile = Field(default_factory=Profile)
    bank: Optional[BankDetails] = None
    role: str = "user"
    is_active: bool = Field(True, alias="isActive")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True

    def to_storage(self) -> dict:
        """JSON-safe dict with the backend's field names."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class AuthResponse(User):
    """
    Login/register payload: the user plus a bearer token.
    """
    token: str

    def to_user(self) -> User:
        return User.model_validate(self.model_dump(by_alias=True, exclude={"token"}))


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    """
    Registration payload, checked client-side before it is sent.
    """
    email: str
    password: str
    uniqueid: Optional[str] = None
    profile: Profile
    bank: Optional[BankDetails] = None

    class Config:
        populate_by_name = True

    @validator("email")
    def check_email(cls, v):
        if not validate_email(v):
            raise ValueError("Please enter a valid email address")
        return v.strip().lower()

    @validator("password")
    def check_password(cls, v):
        error = validate_password(v)
        if error:
            raise ValueError(error)
        return v

    @validator("profile")
    def check_profile(cls, v):
        if not v.owner_name or not v.company_name or not v.address:
            raise ValueError("Owner name, company name and address are required")
        if not validate_phone_number(v.mobile_number):
            raise ValueError("Please enter a valid 10-digit mobile number")
        if v.gst_number and not validate_gstin(v.gst_number):
            raise ValueError("Invalid GST number format")
        if v.pan_number and not validate_pan(v.pan_number):
            raise ValueError("Invalid PAN number format")
        return v

    @validator("bank")
    def check_bank(cls, v):
        if v and v.ifsc_code and not validate_ifsc(v.ifsc_code):
            raise ValueError("Invalid IFSC code format")
        return v

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResetTokenInfo(BaseModel):
    email: str
    user_name: Optional[str] = Field(None, alias="userName")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")

    class Config:
        populate_by_name = True
