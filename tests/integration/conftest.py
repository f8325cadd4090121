"""Pytest configuration for tests against a deployed functions backend."""

import os

import pytest
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@pytest.fixture(scope="session")
def functions_available():
    """Check if a functions backend and a user token are configured."""
    has_backend = bool(os.getenv("FUNCTIONS_BASE_URL") or os.getenv("FIREBASE_PROJECT_ID"))
    return has_backend and bool(os.getenv("STORYBOX_ID_TOKEN"))


@pytest.fixture(autouse=True)
def skip_if_no_functions(request, functions_available):
    """Skip tests marked with requires_functions if the backend isn't configured."""
    if request.node.get_closest_marker("requires_functions"):
        if not functions_available:
            pytest.skip("Functions backend or STORYBOX_ID_TOKEN not set")


@pytest.fixture
def id_token():
    return os.getenv("STORYBOX_ID_TOKEN")
