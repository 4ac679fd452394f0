import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hotshot.core.config import Settings
from hotshot.db import create_engine, create_session_factory, init_db
from hotshot.main import create_app, shutdown, startup
from hotshot.services.change_feed import ChangeFeed
from hotshot.services.exporter import ResultsExporter
from hotshot.services.lifecycle import RoomLifecycle
from hotshot.services.store import RoomStore
from hotshot.services.voting import VotingEngine

HOST = "host-token"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'hotshot.db'}",
        log_dir=tmp_path / "logs",
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine(settings.assembled_db_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def store(engine, feed):
    return RoomStore(create_session_factory(engine), feed)


@pytest.fixture
def exporter(store):
    return ResultsExporter(store)


@pytest.fixture
def lifecycle(store, settings, exporter):
    return RoomLifecycle(store, settings, exporter)


@pytest.fixture
def voting(store, settings):
    return VotingEngine(store, settings)


@pytest_asyncio.fixture
async def live_room(lifecycle):
    """A published room whose first question ("Best color?", 5 options) is open."""
    room = await lifecycle.create_room("Trivia Night", HOST)
    question = await lifecycle.add_question(room.id, "Best color?", 5)
    await lifecycle.publish_room(room.id)
    question = await lifecycle.open_question(room.id, question.id)
    return room, question


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    await startup(app, settings)
    yield app
    await shutdown(app)


@pytest_asyncio.fixture
async def browser(app):
    """Factory for HTTP clients that each keep their own cookie jar, like separate browsers."""
    clients = []

    def make() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(client)
        return client

    yield make
    for client in clients:
        await client.aclose()
