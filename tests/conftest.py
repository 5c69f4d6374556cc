"""Shared fixtures."""

from __future__ import annotations

import pytest
from factories import make_info, make_provisioning, make_registration

from acm_exporter.store import (
    INFO_KIND,
    PROVISIONING_KIND,
    REGISTRATION_KIND,
    InMemoryStore,
)


@pytest.fixture()
def store() -> InMemoryStore:
    """Store holding one complete, Hive-provisioned cluster named c1."""
    s = InMemoryStore()
    s.put(INFO_KIND, make_info())
    s.put(REGISTRATION_KIND, make_registration())
    s.put(PROVISIONING_KIND, make_provisioning())
    return s
