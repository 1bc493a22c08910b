"""
Application settings management.
Uses python-dotenv to load environment variables from .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

# Store original environment values to prevent modification
_ENV_CACHE = {}


def get_setting(key: str, default=None):
    """
    Get a setting from environment variables.

    Values are read once and cached, so later changes to the process
    environment do not leak into a running command.

    Args:
        key: Environment variable name
        default: Default value if not found

    Returns:
        The environment variable value or default

    Example:
        >>> DATABASE_PATH = get_setting('DATABASE_PATH', 'data/translation_manager.db')
        >>> DEBUG = get_setting('DEBUG', 'False') == 'True'
    """
    if key not in _ENV_CACHE:
        _ENV_CACHE[key] = os.getenv(key, default)

    value = _ENV_CACHE[key]

    # For mutable types, return a copy
    if isinstance(value, (list, dict)):
        return value.copy()

    return value


def get_bool_setting(key: str, default: str = 'False') -> bool:
    """Read a boolean flag ('true', '1', 'yes' are truthy)."""
    return str(get_setting(key, default)).lower() in ('true', '1', 'yes')


# Debug mode
DEBUG = get_bool_setting('DEBUG', 'False')

# Database path
DATABASE_PATH = get_setting('DATABASE_PATH', 'data/translation_manager.db')

# Language code of the translation target (langlinks.lang)
TARGET_LANGUAGE = get_setting('TARGET_LANGUAGE', 'ar')

# Record every status edit attempt in the status_edit_log table
EDIT_LOG_ENABLED = get_bool_setting('EDIT_LOG_ENABLED', 'True')
