"""
Configuration Module for Trackbox.
Centralizes all app settings with environment variable support.
"""

import hashlib
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration with sensible defaults."""

    # Paths
    BASE_DIR = Path(__file__).parent.parent
    DATABASE_PATH = BASE_DIR / 'trackbox.db'

    # Flask — stable fallback key derived from the DB path so it survives restarts
    _fallback_key = hashlib.sha256(
        f'trackbox-secret-{Path(__file__).parent.parent / "trackbox.db"}'.encode()
    ).hexdigest()
    SECRET_KEY = os.getenv('SECRET_KEY', _fallback_key)
    DEBUG = os.getenv('FLASK_DEBUG', 'true').lower() == 'true'
    LOG_LEVEL = os.getenv('TRACKBOX_LOG_LEVEL', 'INFO').upper()
    BASE_URL = os.getenv('TRACKBOX_BASE_URL', 'http://localhost:5001')

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', f'sqlite:///{DATABASE_PATH}')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Listing defaults
    DEFAULT_PAGE = 1
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = int(os.getenv('TRACKBOX_MAX_PAGE_SIZE', '100'))

    # Accounts
    PASSWORD_WORK_FACTOR = 10
    PASSWORD_MIN_LENGTH = 8
    PASSWORD_RESET_TTL_HOURS = 1
    GRAVATAR_SIZE = 200


# Create default instance
config = Config()
