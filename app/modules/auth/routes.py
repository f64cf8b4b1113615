from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    SendVerificationRequest, VerifyCodeRequest, VerificationResponse
)
from app.modules.auth.service import AuthService, safe_redirect_path, verification_first_name
from app.core.dependencies import get_auth_service, get_current_token, get_current_user_id, is_email_verified
from app.config import settings
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user; a verification code is emailed"""
    return service.register(register_data)


@router.post("/verification", response_model=VerificationResponse)
async def send_verification_code(
    request: SendVerificationRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """(Re)send a six-digit verification code to the signed-in user's address"""
    first_name = request.first_name or verification_first_name(current_user)
    service.send_verification_code(current_user["email"], first_name, current_user["id"])
    return VerificationResponse(message="Verification code sent")


@router.put("/verification", response_model=VerificationResponse)
async def verify_code(
    request: VerifyCodeRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Confirm the verification code and mark the signed-in user's email as verified"""
    service.verify_code(current_user["email"], request.code, current_user["id"])
    return VerificationResponse(message="Email verified")


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
):
    """Get current authenticated user"""
    return {**current_user, "email_verified": is_email_verified(current_user)}


@router.get("/callback")
async def auth_callback(
    code: Optional[str] = None,
    redirect: Optional[str] = Query(None),
    service: AuthService = Depends(get_auth_service)
):
    """OAuth / magic-link callback: exchange the code and send the browser back to the app"""
    if code and service.complete_oauth_login(code) is None:
        return RedirectResponse(f"{settings.app_url}/login", status_code=302)
    path = safe_redirect_path(redirect)
    return RedirectResponse(f"{settings.app_url}{path}", status_code=302)
