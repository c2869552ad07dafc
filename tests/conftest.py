import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

import pytest

from tests.helpers import create_actor, create_effect, create_item, recorder, run
from effectengine.events.bus import EventBus
from effectengine.session import Session
from effectengine.world import create_world, dispose_world


__all__ = [
    "create_actor",
    "create_effect",
    "create_item",
    "recorder",
    "run",
]


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def arbiter_session():
    return Session(user_id="arbiter", arbiter=True)


@pytest.fixture
def player_session():
    return Session(user_id="player", arbiter=False)


@pytest.fixture
def engine(bus, arbiter_session):
    systems = create_world(bus, arbiter_session)
    yield systems
    dispose_world(systems.world)


@pytest.fixture
def player_engine(bus, player_session):
    systems = create_world(bus, player_session)
    yield systems
    dispose_world(systems.world)
