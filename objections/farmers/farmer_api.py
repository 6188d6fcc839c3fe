"""
Farmer Account API

Endpoints:
- POST /farmer/register - Create farmer account
- POST /farmer/login - Exchange national ID + password for a token
- POST /farmer/forgot-password - Start password reset (code sent out of band)
- POST /farmer/verify-code - Exchange verification code for reset token
- POST /farmer/reset-password - Set new password with reset token
"""

from fastapi import APIRouter, Depends

from objections.farmers.accounts import FarmerAccounts
from objections.service.dependencies import get_accounts, get_token_service
from objections.service.schemas import (
    FarmerLoginResponse,
    FarmerSummary,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    ResetTokenResponse,
    VerifyCodeRequest,
)
from objections.tokens import TokenService

router = APIRouter(prefix="/farmer", tags=["farmers"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register_farmer(
    body: RegisterRequest,
    accounts: FarmerAccounts = Depends(get_accounts),
):
    farmer = accounts.register(
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        national_id=body.national_id,
        password=body.password,
    )
    return RegisterResponse(message="Registered", farmer=FarmerSummary.model_validate(farmer))


@router.post("/login", response_model=FarmerLoginResponse)
def login_farmer(
    body: LoginRequest,
    accounts: FarmerAccounts = Depends(get_accounts),
    tokens: TokenService = Depends(get_token_service),
):
    farmer = accounts.authenticate(body.national_id, body.password)
    return FarmerLoginResponse(
        token=tokens.issue_for_farmer(farmer.id),
        farmer=FarmerSummary.model_validate(farmer),
    )


@router.post("/forgot-password", response_model=ResetTokenResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    accounts: FarmerAccounts = Depends(get_accounts),
):
    """
    Start a password reset.

    The verification code goes to the configured code sender; the response
    only carries the reset token.
    """
    reset = accounts.request_password_reset(body.national_id, body.phone)
    return ResetTokenResponse(reset_token=reset.reset_token)


@router.post("/verify-code", response_model=ResetTokenResponse)
def verify_code(
    body: VerifyCodeRequest,
    accounts: FarmerAccounts = Depends(get_accounts),
):
    reset_token = accounts.verify_code(body.national_id, body.verification_code)
    return ResetTokenResponse(reset_token=reset_token)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    accounts: FarmerAccounts = Depends(get_accounts),
):
    accounts.reset_password(body.national_id, body.reset_token, body.password)
    return MessageResponse(message="Password reset")
