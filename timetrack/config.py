"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    """Application settings."""
    
    # Slack
    slack_bot_token: str = os.getenv("SLACK_BOT_TOKEN", "")
    slack_app_token: str = os.getenv("SLACK_APP_TOKEN", "")
    slack_signing_secret: str = os.getenv("SLACK_SIGNING_SECRET", "")
    
    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///timetrack.db")
    db_timeout_seconds: int = int(os.getenv("DB_TIMEOUT_SECONDS", "30"))
    db_echo: bool = os.getenv("DB_ECHO", "").lower() in ("1", "true", "yes")
    
    # Reports ("today", "week", ... are computed in this zone)
    report_timezone: str = os.getenv("REPORT_TIMEZONE", "UTC")


settings = Settings()
