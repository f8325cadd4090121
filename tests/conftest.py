"""Root pytest configuration for shared markers."""


def pytest_configure(config):
    """Register custom markers used across test directories."""
    config.addinivalue_line(
        "markers", "requires_functions: mark test as requiring a deployed functions backend"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow (makes API calls)"
    )
