import json
from pathlib import Path

import pytest

from housing_availability.models import AvailabilityPolicy
from tests.factories import build_property


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def policy():
    """Default policy: active, confirmed, pending and pending_payment block."""
    return AvailabilityPolicy()


@pytest.fixture
def simple_property():
    """Property P with one sub-room S1 holding units U1 and U2, all levels enabled."""
    return build_property()


@pytest.fixture
def shared_flat():
    """Property with two sub-rooms: S1 (U1, U2) and S2 (U3, U4, U5)."""
    return build_property(
        property_id="FLAT",
        layout={"S1": ["U1", "U2"], "S2": ["U3", "U4", "U5"]},
    )


@pytest.fixture
def property_rows():
    """Load stored property rows from fixture."""
    with open(FIXTURES_DIR / "storage" / "property_rows.json") as f:
        return json.load(f)


@pytest.fixture
def reservation_rows():
    """Load stored reservation rows from fixture."""
    with open(FIXTURES_DIR / "storage" / "reservation_rows.json") as f:
        return json.load(f)
