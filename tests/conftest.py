"""
Pytest configuration and fixtures
测试配置和固件
"""

import random
import pytest
from typing import List

from impostor.core.store import MemoryStore, init_store, close_store
from impostor.main import app
from impostor.api.v1.endpoints.rooms import get_room_service
from impostor.schemas.room import Room
from impostor.services import room as transitions
from impostor.services.room_service import RoomService

START_MILLIS = 1_700_000_000_000


class FakeClock:
    """Controllable epoch-millisecond clock"""

    def __init__(self, now: int = START_MILLIS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float):
        self.now += int(seconds * 1000)


def make_room(player_count: int = 3, code: str = "ABCDE") -> Room:
    """Room in lobby with host ``p0`` and players ``p1..pN-1``"""
    room = transitions.create_room(code, "p0", "Player 0")
    for i in range(1, player_count):
        transitions.join_room(room, f"p{i}", f"Player {i}")
    return room


def crewmate_ids(room: Room) -> List[str]:
    return [pid for pid in room.player_ids if pid not in room.impostor_ids]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def room_service(memory_store, clock):
    return RoomService(memory_store, clock=clock, rng=random.Random(7))


@pytest.fixture
async def client(memory_store, clock):
    """HTTP client bound to an in-memory store and a fake clock"""
    from httpx import AsyncClient, ASGITransport

    await init_store(memory_store)
    app.dependency_overrides[get_room_service] = lambda: RoomService(memory_store, clock=clock)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
    await close_store()
