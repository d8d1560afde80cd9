"""
Application Configuration

Centralised settings for the generation provider, logging and storage.
Values come from the environment; a project-level .env file is loaded first.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


@dataclass
class Settings:
    """Runtime settings resolved from environment variables."""
    # Generation provider
    gemini_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    )
    gemini_model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"))
    gemini_temperature: float = field(default_factory=lambda: _env_float("GEMINI_TEMPERATURE", 0.7))
    gemini_max_output_tokens: int = field(default_factory=lambda: _env_int("GEMINI_MAX_OUTPUT_TOKENS", 2000))
    gemini_timeout_seconds: int = field(default_factory=lambda: _env_int("GEMINI_TIMEOUT_SECONDS", 60))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    # Storage
    reports_dir: str = field(default_factory=lambda: os.getenv("REPORTS_DIR", "reports"))
    seed_data_path: Optional[str] = field(default_factory=lambda: os.getenv("SEED_DATA_PATH") or None)

    # Diagnosis-suggestion lab selection
    lab_window_months: int = field(default_factory=lambda: _env_int("LAB_WINDOW_MONTHS", 6))
    diagnosis_lab_limit: int = field(default_factory=lambda: _env_int("DIAGNOSIS_LAB_LIMIT", 15))


settings = Settings()
