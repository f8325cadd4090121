"""
Tests that call the deployed generation callables.

These tests are slow and use real credits - run selectively:
    pytest tests/integration -v

Requires in .env:
    - FIREBASE_PROJECT_ID (or FUNCTIONS_BASE_URL)
    - STORYBOX_ID_TOKEN (a signed-in user's Firebase ID token)
"""
