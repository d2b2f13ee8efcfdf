"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from datetime import date
from pathlib import Path
from typing import Dict, Any

from jobmatch.database import init_database, get_session
from jobmatch.models import ProfileSnapshot


@pytest.fixture
def today() -> date:
    """Fixed "current date" so ongoing roles score deterministically."""
    return date(2025, 1, 1)


@pytest.fixture
def profile_data() -> Dict[str, Any]:
    """Complete candidate profile as served by the profile store."""
    return {
        "fullName": "Nimal Perera",
        "email": "nimal@example.com",
        "phone": "+94 77 123 4567",
        "location": "Colombo",
        "headline": "Backend developer",
        "experience": [
            {
                "title": "Developer",
                "company": "Company A",
                "location": "Colombo",
                "startDate": "2020-01-01",
                "endDate": "2022-01-01",
                "description": "Worked on projects",
            }
        ],
        "education": [
            {
                "institution": "University of Colombo",
                "degree": "Bachelor of Science",
                "fieldOfStudy": "Computer Science",
                "startDate": "2015-01-01",
                "endDate": "2019-01-01",
            }
        ],
        "hasPrimaryCV": True,
        "hasPrimaryPhoto": True,
    }


@pytest.fixture
def full_profile(profile_data) -> ProfileSnapshot:
    return ProfileSnapshot.from_dict(profile_data)


@pytest.fixture
def profile_file(tmp_path, profile_data) -> Path:
    """Profile JSON written to disk for CLI tests."""
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(profile_data, indent=2))
    return path


@pytest.fixture
def db_path(tmp_path) -> Path:
    path = tmp_path / "matching.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Create a temporary database and return a session."""
    session = get_session(db_path)
    yield session
    session.close()
