"""Shared test fixtures for acme-renewal-manager."""

import pytest

import renewal_manager.auth as _auth
from renewal_manager.models import RenewalRecord, RenewResult
from renewal_manager.plugins import ManualOptions, SelfHostingOptions


def pytest_runtest_setup(item):
    """Reset module-level caches between tests."""
    _auth._credential = None


@pytest.fixture
def make_renewal():
    """Build a RenewalRecord with default plugins and an optional outcome history."""

    def _make(name="example.com", history=(), **overrides):
        fields = {
            "id": overrides.pop("id", name.replace(".", "-")),
            "target": ManualOptions(common_name=name, hosts=(name,)),
            "validation": SelfHostingOptions(),
            "last_friendly_name": name,
            "history": [RenewResult(success=s) if not isinstance(s, RenewResult) else s for s in history],
        }
        fields.update(overrides)
        return RenewalRecord(**fields)

    return _make
