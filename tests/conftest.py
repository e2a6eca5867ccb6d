"""
Pytest configuration and fixtures for the name corrector tests.
"""

import os

import pytest

# Set test environment before the service module is imported
os.environ["RATELIMIT_ENABLED"] = "false"
os.environ["LOG_FILE"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ["CACHE_TYPE"] = "NullCache"

from name_corrector.schemas import ClientProfile


@pytest.fixture
def client_profile() -> ClientProfile:
    """Profile for 1990-05-15: Life Path 3, Birth Day 6, grid missing 2, 3, 4, 6, 7 and 8."""
    return ClientProfile(
        full_name="John Doe",
        birth_date="1990-05-15",
        expression_number=7,
        life_path_number=3,
        birth_day_number=6,
        soul_urge_number=1,
        personality_number=6,
    )
