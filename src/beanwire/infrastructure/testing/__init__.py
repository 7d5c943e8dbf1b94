"""
Testing utilities module.

Provides helpers and utilities for testing applications using beanwire.
"""

from .utilities import RecordingResolver, TestContainer, create_mock_container

__all__ = [
    "TestContainer",
    "create_mock_container",
    "RecordingResolver",
]
