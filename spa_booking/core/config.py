from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Relax Thai Spa"
    API_V1_STR: str = "/api"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "production"
    STATIC_DIR: str = "dist"
    LOG_DIR: str = "logs"

    # Google Sheets (ledger)
    SHEET_ID: str = ""
    GOOGLE_CREDENTIALS_FILE: str = "google_credentials.json"
    GOOGLE_CREDENTIALS_JSON: str = ""
    BOOKINGS_SHEET_NAME: str = "Sheet1"
    ADMIN_SHEET_NAME: str = "Admin"

    # Admin access
    ADMIN_PASSWORD: str = ""
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    ADMIN_TOKEN_EXPIRE_MINUTES: Optional[int] = None

    # Email notifications
    ADMIN_EMAIL: str = ""
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""

    # WhatsApp (Meta Cloud API)
    META_WA_TOKEN: str = ""
    META_WA_PHONE_NUMBER_ID: str = ""
    META_WA_API_VERSION: str = "v19.0"
    ADMIN_WA_NUMBER: str = ""
    WA_TEMPLATE_NAME: str = "form_submission_alert"
    WA_LANGUAGE_CODE: str = "en"

    # Branding for the visit slip
    SPA_NAME: str = "RELAX THAI SPA"
    SPA_TAGLINE: str = "Wellness • Therapy • Relaxation"
    SPA_FOOTER: str = "Thank you for choosing Relax Thai Spa. We wish you wellness & relaxation."
    LOGO_PATH: Optional[str] = "dist/logo.png"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

def get_settings() -> Settings:
    """FastAPI dependency; tests override it with their own Settings."""
    return settings
