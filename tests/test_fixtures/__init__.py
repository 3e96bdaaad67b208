"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .response_factory import PrometheusResponseFactory, RecordingTransport

__all__ = ["PrometheusResponseFactory", "RecordingTransport"]
