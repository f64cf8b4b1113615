from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    email_verified: bool = False


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    requires_verification: bool = True
    message: str


class SendVerificationRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)


class VerifyCodeRequest(BaseModel):
    code: str = Field(..., pattern=r"^\d{6}$")


class VerificationResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
