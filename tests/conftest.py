import random
from datetime import datetime, timezone

import pytest

from tournament_wheel.models.team_model import TeamModel
from tournament_wheel.services.document_store import InMemoryDocumentStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_teams(count: int):
    # Team ids A, B, C, ... with a couple of members each
    return [
        TeamModel(id=chr(ord("A") + i), name=f"Team {chr(ord('A') + i)}", members=[f"user{i}a", f"user{i}b"])
        for i in range(count)
    ]


@pytest.fixture
def four_teams():
    return make_teams(4)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def team_factory():
    return make_teams


@pytest.fixture
def fixed_now():
    return FIXED_NOW
