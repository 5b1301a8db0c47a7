import pytest

from app.api.ws.connection.connection_handler import ConnectionHandler
from app.api.ws.connection.model.connection import Connection
from app.api.ws.connection.relay_dispatcher import RelayDispatcher
from app.api.ws.connection.room_registry import RoomRegistry
from tests.fakes import FakeClock, FakeWebSocket


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return RoomRegistry(clock=clock)


@pytest.fixture
def dispatcher(registry):
    return RelayDispatcher(registry)


@pytest.fixture
def make_connection():
    def factory(fail_sends=False):
        return Connection(FakeWebSocket(fail_sends=fail_sends))

    return factory


@pytest.fixture
def make_handler(registry, dispatcher):

    def factory(fail_sends=False, **kwargs):
        handler = ConnectionHandler(FakeWebSocket(fail_sends=fail_sends), registry, dispatcher, **kwargs)
        handler.connection.start()
        return handler

    return factory
