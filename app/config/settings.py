from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin auth calls (signup, email verification)

    # Brevo transactional email
    brevo_api_key: Optional[str] = None
    brevo_api_url: str = "https://api.brevo.com/v3/smtp/email"
    email_sender_name: str = "TaskMaster"
    email_sender_address: str = "no-reply@taskmaster.app"
    email_timeout_seconds: float = 10.0

    # AI assistant (OpenAI-compatible chat completions; defaults to Gemini's endpoint)
    ai_api_key: Optional[str] = None
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    ai_model: str = "gemini-2.0-flash"
    ai_temperature: float = 0.7
    ai_max_tokens: int = 8192

    # AWS S3 for documents (optional, Supabase Storage is used otherwise)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Documents
    documents_bucket: str = "documents"
    max_upload_size_mb: int = 25
    signed_url_ttl_seconds: int = 3600

    # Verification codes and invites
    verification_code_ttl_minutes: int = 10
    invite_ttl_days: int = 7

    # App
    app_name: str = "taskmaster-backend"
    app_url: str = "http://localhost:3000"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
