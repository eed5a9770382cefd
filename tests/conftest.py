import pytest

from spa_booking.core.config import Settings


def build_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "test",
        "SHEET_ID": "sheet-123",
        "GOOGLE_CREDENTIALS_FILE": "",
        "ADMIN_PASSWORD": "letmein",
        "JWT_SECRET": "test-secret",
        "ADMIN_EMAIL": "owner@spa.test",
        "SMTP_USERNAME": "mailer@spa.test",
        "SMTP_PASSWORD": "smtp-pass",
        "META_WA_TOKEN": "wa-token",
        "META_WA_PHONE_NUMBER_ID": "1234567890",
        "ADMIN_WA_NUMBER": "+919999999999",
        "LOGO_PATH": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return build_settings()
