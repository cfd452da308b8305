"""Configuration management."""

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv
import yaml

DEFAULT_BRANDING_PATH = Path(__file__).parent / "branding.yaml"


@dataclass
class Config:
    # Supabase
    supabase_url: str
    supabase_key: str

    # Email transport
    email_transport: str
    email_api_url: str
    email_api_key: str
    email_from: str

    # SMTP
    smtp_host: str
    smtp_port: int
    smtp_username: str
    smtp_password: str

    # Digest
    timezone: str
    branding_file: str

    # App
    log_level: str
    environment: str


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    return Config(
        supabase_url=os.environ["SUPABASE_URL"],
        supabase_key=os.environ["SUPABASE_SERVICE_ROLE_KEY"],
        email_transport=os.environ.get("EMAIL_TRANSPORT", "log").lower(),
        email_api_url=os.environ.get("EMAIL_API_URL", ""),
        email_api_key=os.environ.get("EMAIL_API_KEY", ""),
        email_from=os.environ.get("EMAIL_FROM", ""),
        smtp_host=os.environ.get("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=int(os.environ.get("SMTP_PORT", "465")),
        smtp_username=os.environ.get("SMTP_USERNAME", ""),
        smtp_password=os.environ.get("SMTP_PASSWORD", ""),
        timezone=os.environ.get("DIGEST_TIMEZONE", "Europe/Paris"),
        branding_file=os.environ.get("DIGEST_BRANDING_FILE", str(DEFAULT_BRANDING_PATH)),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        environment=os.environ.get("ENVIRONMENT", "development"),
    )


def load_branding(path: str | Path | None = None) -> dict:
    """Load venue branding from YAML.

    Values in a custom file override the packaged defaults key by key.
    """
    with open(DEFAULT_BRANDING_PATH, encoding="utf-8") as f:
        branding = yaml.safe_load(f)

    if path and Path(path) != DEFAULT_BRANDING_PATH:
        with open(path, encoding="utf-8") as f:
            overrides = yaml.safe_load(f) or {}
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(branding.get(key), dict):
                branding[key] = {**branding[key], **value}
            else:
                branding[key] = value

    return branding


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config():
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
