"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

# Front-end bundle shipped inside the package.
PACKAGE_STATIC_DIR = Path(__file__).resolve().parent / "static"

DEFAULT_PEOPLE = ("Annabelle", "Florence", "Gregoire", "Manon", "Valentin", "Yves")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    people: str = ",".join(DEFAULT_PEOPLE)
    page_title: str = "Reservations appartement"
    banner_title: str = "Planning des 18 prochains mois"
    base_path: str = ""
    password: str = ""
    password_hint: str = ""
    database_path: Path = Path("data") / "reservations.db"
    static_dir: Path = PACKAGE_STATIC_DIR
    session_lifetime_hours: float = 24.0
    host: str = "0.0.0.0"
    port: int = 64512
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="BOOKER_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_people(raw: str | None) -> list[str]:
    """Parse the comma separated people list, falling back to the defaults."""
    if raw is None:
        return list(DEFAULT_PEOPLE)
    names = [chunk.strip() for chunk in raw.split(",")]
    names = [name for name in names if name]
    return names or list(DEFAULT_PEOPLE)


def sanitise_base_path(value: str | None) -> str:
    """Normalise a mount prefix to "" or "/prefix" without a trailing slash."""
    trimmed = (value or "").strip()
    if trimmed in {"", "/"}:
        return ""
    if not trimmed.startswith("/"):
        trimmed = "/" + trimmed
    return trimmed.rstrip("/")
