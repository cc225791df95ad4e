"""
Utility functions and constants for the nomination portal.
"""

import os
import sys

import streamlit as st
from loguru import logger

# Nomination rules
MAX_NOMINATIONS = 5

# Durable storage keys
SAVED_MOVIES_KEY = "savedMovies"
SEARCH_QUERY_KEY = "searchQuery"
SHARE_NAME_KEY = "shareName"
SHARE_AUTHOR_KEY = "shareAuthor"

# OMDb
OMDB_URL = "https://www.omdbapi.com/"
NO_POSTER = "N/A"
REQUEST_TIMEOUT = 8

# Configuration defaults
DEFAULT_PUBLIC_BASE_URL = "http://localhost:8501/"
DEFAULT_STORAGE_FILE = "local_storage.json"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def get_secret(name, default=None):
    """
    Look up a configuration value in Streamlit secrets, then the environment.

    Args:
        name: Secret / environment variable name
        default: Value returned when neither source defines it

    Returns:
        The configured value or default
    """
    try:
        if name in st.secrets:
            return st.secrets[name]
    except Exception as e:
        # No secrets.toml is a normal setup for local runs
        logger.debug(f"Streamlit secrets unavailable for {name}: {e}")

    return os.getenv(name, default)


def get_omdb_api_key():
    """Get the OMDb API key, or None when it is not configured."""
    return get_secret("OMDB_API_KEY")


def get_public_base_url():
    """Base URL that share links point at."""
    return get_secret("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL)


def get_storage_path():
    """Path of the JSON file backing durable storage."""
    return get_secret("STORAGE_FILE", DEFAULT_STORAGE_FILE)


def setup_logging(log_level=None):
    """
    Set up loguru with a single stderr sink.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    level = (log_level or get_secret("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()

    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    logger.debug(f"Logging configured at {level}")
    return level
