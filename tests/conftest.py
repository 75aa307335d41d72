"""
Pytest configuration and fixtures for PyFastSample test suite.

This file contains shared fixtures, test configuration, and utilities
used across the test suite.
"""
import os
import sys
import pytest
import numpy as np


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add the package root to Python path for testing
    package_root = os.path.dirname(os.path.dirname(__file__))
    if package_root not in sys.path:
        sys.path.insert(0, package_root)

    for marker in ("unit", "integration", "slow", "gpu", "importtest"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Mark import tests for easy selection
        if "import" in item.name.lower() or "test_imports.py" in str(item.fspath):
            item.add_marker("importtest")


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    """Initialize Taichi once on CPU for the whole session."""
    import pyfastsample as ps

    ps.init("cpu", offline_cache=False)
    return True


class TestDataManager:
    """Helper class for creating test images."""

    @staticmethod
    def create_gradient(width=16, height=12, channels=1):
        """Linear ramp image; channel c is offset by 10 * c."""
        x = np.arange(width, dtype=np.float32)
        y = np.arange(height, dtype=np.float32)
        X, Y = np.meshgrid(x, y)
        base = X + 2.0 * Y
        if channels == 1:
            return base
        return np.stack([base + 10.0 * c for c in range(channels)], axis=2)

    @staticmethod
    def create_random(width=20, height=15, channels=3, seed=42):
        rng = np.random.default_rng(seed)
        return rng.random((height, width, channels)).astype(np.float32)

    @staticmethod
    def create_normal_map(width=12, height=10, seed=7):
        """Random unit vectors with positive z, shape (h, w, 3)."""
        rng = np.random.default_rng(seed)
        v = rng.normal(size=(height, width, 3))
        v[..., 2] = np.abs(v[..., 2]) + 0.5
        v /= np.linalg.norm(v, axis=2, keepdims=True)
        return v.astype(np.float32)


@pytest.fixture
def test_data_manager():
    """Provide access to test data creation utilities."""
    return TestDataManager()
