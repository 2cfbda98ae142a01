#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Abbreviation Files ==========
    abbrev_file_encoding: str = "utf-8"
    abbrev_file_suffix: str = ".abbrev"
    max_import_size_kb: int = 512  # Upload limit for text imports

    # ========== Logging ==========
    log_level: str = "INFO"
    log_to_file: bool = False
    log_file_name: str = "abbrev_manager.log"

    # ========== API ==========
    # CORS origins (comma-separated in env, parsed to list)
    cors_origins: str = ""  # Empty = use default dev origins
    default_proof_name: Optional[str] = None  # Create and select one proof on startup

    # ========== Directories ==========
    abbrev_dir: Path = BASE_DIR / "data" / "abbreviations"
    logs_dir: Path = BASE_DIR / "data" / "logs"

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Create directories
        for dir_path in [self.abbrev_dir, self.logs_dir]:
            dir_path.mkdir(exist_ok=True, parents=True)

    def get_cors_origins(self) -> list:
        """Get CORS origins as a list. Falls back to dev defaults if empty."""
        if self.cors_origins:
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        # Dev defaults
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ]

    def abbrev_path(self, file_name: str) -> Path:
        """Resolve a file name inside abbrev_dir (directory parts are dropped)."""
        name = Path(file_name).name
        if not name:
            raise ValueError("Empty file name")
        if not Path(name).suffix:
            name += self.abbrev_file_suffix
        return self.abbrev_dir / name

    @property
    def log_file(self) -> Optional[Path]:
        return self.logs_dir / self.log_file_name if self.log_to_file else None


# Global settings instance
settings = Settings()
