"""
Pytest configuration and shared fixtures for airdrop distributor tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

# Import fixture modules
_common = importlib.import_module("fixtures.common")

# Extract factory functions
make_address = _common.make_address
make_entitlements = _common.make_entitlements
make_tree = _common.make_tree
make_distributor = _common.make_distributor


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def entitlements():
    """Provide the default [(A,100), (B,200), (C,300)] entitlement list."""
    return make_entitlements()


@pytest.fixture
def tree(entitlements):
    """Provide the EntitlementTree for the default entitlements."""
    return make_tree(entitlements)


@pytest.fixture
def custody():
    """Provide an empty InMemoryCustody."""
    from core.custody import InMemoryCustody
    return InMemoryCustody()


@pytest.fixture
def distributor(tree, custody):
    """Provide an initialized, unfunded distributor for the default tree."""
    return make_distributor(tree, custody=custody)


@pytest.fixture
def funded_distributor(tree, custody):
    """Provide a distributor for the default tree funded with 500 tokens."""
    return make_distributor(tree, custody=custody, funded=500)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove AIRDROP_* variables so config tests see only what they set."""
    import os
    for key in list(os.environ):
        if key.startswith("AIRDROP_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
