"""
Configuration for the land deal web application.

Values come from environment variables; a ``.env`` file in the working
directory is loaded first so local development needs no exported variables.
"""

import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration with sensible local defaults."""

    # --- Persistence ---
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///land_deal.sqlite3")

    # --- Flask ---
    SECRET_KEY: str = os.getenv("FLASK_SECRET_KEY", "dev-secret-key")

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Reports ---
    REPORT_PREFIX: str = os.getenv("REPORT_PREFIX", "GDK_NEXUS")
    REPORT_PAGE_SIZE: str = os.getenv("REPORT_PAGE_SIZE", "a4")
    REPORT_ORIENTATION: str = os.getenv("REPORT_ORIENTATION", "portrait")


config = Config()
