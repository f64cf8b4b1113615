import hashlib
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.core.email import BrevoEmailClient, EmailError
from app.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

UNIQUE_VIOLATION = "23505"


def generate_verification_code() -> str:
    """Random six-digit code in 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def safe_redirect_path(redirect: Optional[str], default: str = "/dashboard") -> str:
    """Only relative paths are allowed after a login callback."""
    if not redirect:
        return default
    if not redirect.startswith("/") or redirect.startswith("//") or "\\" in redirect:
        return default
    return redirect


def verification_first_name(user_data: Dict[str, Any]) -> str:
    """Greeting name for the verification email: first word of full_name, else the email local part."""
    full_name = ((user_data.get("user_metadata") or {}).get("full_name") or "").strip()
    if full_name:
        return full_name.split()[0]
    return (user_data.get("email") or "").split("@")[0] or "there"


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, admin: Optional[Client] = None, email_client: Optional[BrevoEmailClient] = None):
        self.supabase = supabase
        self.admin = admin or supabase
        self.email_client = email_client or BrevoEmailClient()

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Create the auth user unconfirmed, add the public profile row and send a verification code"""
        try:
            auth_response = self.admin.auth.admin.create_user({
                "email": register_data.email,
                "password": register_data.password,
                "email_confirm": False,
                "user_metadata": {
                    "full_name": register_data.full_name,
                    "email_verified": False,
                },
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Error creating user: {error_message}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

        if not auth_response.user:
            raise HTTPException(status_code=500, detail="Failed to create user")
        user_id = auth_response.user.id
        logger.info(f"User created: {user_id}")

        now = datetime.now(timezone.utc).isoformat()
        try:
            self.admin.table("users").insert({
                "id": user_id,
                "full_name": register_data.full_name,
                "email": register_data.email,
                "created_at": now,
                "updated_at": now,
            }).execute()
        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                logger.info(f"User record already exists in public.users for {user_id}")
            else:
                logger.error(f"Error creating user record: {e}")
                raise HTTPException(status_code=500, detail="Failed to create user profile")

        # The user can request another code later, so a failed send does not fail signup
        try:
            self.send_verification_code(register_data.email, register_data.first_name, user_id)
        except HTTPException as e:
            logger.error(f"Failed to send verification code to {register_data.email}: {e.detail}")

        return RegisterResponse(
            user_id=user_id,
            email=auth_response.user.email or register_data.email,
            requires_verification=True,
            message="Account created successfully. Please check your email for verification code."
        )

    def send_verification_code(self, email: str, first_name: str, user_id: str) -> str:
        """Store a fresh six-digit code and email it. Returns the code."""
        code = generate_verification_code()
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(minutes=settings.verification_code_ttl_minutes)
        try:
            self.admin.table("email_verification_codes").insert({
                "user_id": user_id,
                "email": email,
                "code": code,
                "expires_at": expires_at.isoformat(),
                "created_at": now.isoformat(),
                "used": False,
            }).execute()
        except Exception as e:
            logger.error(f"Error storing verification code: {e}")
            raise HTTPException(status_code=500, detail="Failed to create verification code")

        try:
            self.email_client.send_verification_email(email, first_name, code)
        except EmailError as e:
            logger.error(f"Failed to send verification email: {e}")
            raise HTTPException(status_code=500, detail="Failed to send verification email")
        return code

    def verify_code(self, email: str, code: str, user_id: str) -> bool:
        """Check the newest unused, unexpired code and mark the user's email as verified"""
        now = datetime.now(timezone.utc).isoformat()
        try:
            result = self.admin.table("email_verification_codes")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("email", email)\
                .eq("code", code)\
                .eq("used", False)\
                .gt("expires_at", now)\
                .order("created_at", desc=True)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching verification code: {e}")
            raise HTTPException(status_code=500, detail="Failed to verify code")

        if not result.data:
            raise HTTPException(status_code=400, detail="Invalid or expired verification code")

        try:
            self.admin.table("email_verification_codes")\
                .update({"used": True})\
                .eq("id", result.data[0]["id"])\
                .execute()
        except Exception as e:
            logger.error(f"Error marking code as used: {e}")

        try:
            self.admin.auth.admin.update_user_by_id(
                user_id,
                {"user_metadata": {"email_verified": True}, "email_confirm": True}
            )
        except Exception as e:
            logger.error(f"Error updating user metadata: {e}")
            raise HTTPException(status_code=500, detail="Failed to verify email")

        clear_auth_cache()
        logger.info(f"Email verified for user {user_id}")
        return True

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            metadata = auth_response.user.user_metadata or {}
            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email,
                email_verified=metadata.get("email_verified") is True
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase tokens are stateless JWTs; they expire on their own
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def complete_oauth_login(self, code: str) -> Optional[str]:
        """Exchange an auth code for a session and upsert the public users row. Returns the user id."""
        try:
            response = self.supabase.auth.exchange_code_for_session({"auth_code": code})
        except Exception as e:
            logger.error(f"Error exchanging code for session: {e}")
            return None

        user = response.user if response else None
        if not user:
            return None

        metadata = user.user_metadata or {}
        email = user.email or ""
        now = datetime.now(timezone.utc).isoformat()
        try:
            self.admin.table("users").upsert({
                "id": user.id,
                "email": email,
                "full_name": metadata.get("full_name") or email.split("@")[0],
                "created_at": now,
                "updated_at": now,
            }, on_conflict="id").execute()
        except Exception as e:
            logger.error(f"Error creating/updating user record: {e}")
        return user.id
