"""
Request/response schemas shared by the routers.
"""

from datetime import datetime
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field


class ObjectionResponse(BaseModel):
    """Response schema for an objection"""
    id: int
    farmer_id: int
    code: str
    transaction_number: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FarmerSummary(BaseModel):
    """Public part of a farmer record"""
    id: int
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class ListingResponse(BaseModel):
    """Paginated admin listing"""
    rows: List[Dict[str, Any]]
    page: int
    totalPages: int
    searchTerm: str


class MessageResponse(BaseModel):
    message: str


class TransitionResponse(BaseModel):
    message: str
    objection: ObjectionResponse


class TokenResponse(BaseModel):
    token: str


class FarmerLoginResponse(BaseModel):
    token: str
    farmer: FarmerSummary


class RegisterResponse(BaseModel):
    message: str
    farmer: FarmerSummary


class ResetTokenResponse(BaseModel):
    reset_token: str


class CanSubmitResponse(BaseModel):
    canSubmit: bool


class RegisterRequest(BaseModel):
    """Request schema for farmer registration"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    national_id: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    national_id: str
    password: str


class ForgotPasswordRequest(BaseModel):
    national_id: str
    phone: str


class VerifyCodeRequest(BaseModel):
    national_id: str
    verification_code: str


class ResetPasswordRequest(BaseModel):
    national_id: str
    reset_token: str
    password: str = Field(..., min_length=1)


class SubmitObjectionRequest(BaseModel):
    """Request schema for filing an objection"""
    transaction_number: str = Field(..., description="Transaction the objection is about")


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class ResolveObjectionRequest(BaseModel):
    objection_id: int
