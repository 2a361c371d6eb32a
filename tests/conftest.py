"""Pytest configuration for the focused-wfs test suite."""


def pytest_configure(config):
    """Register markers used across the suite."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
