# backend/config.py
import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | <cyan>{name}</cyan> - {message} | {extra}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    openai_api_key: Optional[str]
    generation_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    generation_max_tokens: int = 3000
    vision_max_tokens: int = 1000
    generation_temperature: float = 0.3
    max_upload_bytes: int = 10 * 1024 * 1024
    upload_dir: str = "uploads"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (and .env at the project root)."""
    load_dotenv()
    return Settings(
        database_url=os.getenv("DATABASE_URL", "").strip(),
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
        generation_model=os.getenv("GENERATION_MODEL", "gpt-4o-mini"),
        vision_model=os.getenv("VISION_MODEL", "gpt-4o-mini"),
        generation_max_tokens=int(os.getenv("GENERATION_MAX_TOKENS", "3000")),
        vision_max_tokens=int(os.getenv("VISION_MAX_TOKENS", "1000")),
        generation_temperature=float(os.getenv("GENERATION_TEMPERATURE", "0.3")),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
