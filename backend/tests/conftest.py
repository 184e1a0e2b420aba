import pytest
from fastapi.testclient import TestClient

from spinwheel.core.config import Settings
from spinwheel.main import create_app
from spinwheel.services.broadcast import BroadcastHub
from spinwheel.services.spin_coordinator import SpinCoordinator
from spinwheel.storage.json_store import JsonStore


@pytest.fixture
async def store(tmp_path):
    store = JsonStore(str(tmp_path / "data"))
    await store.initialize()
    return store


@pytest.fixture
def hub():
    return BroadcastHub(queue_size=100)


@pytest.fixture
async def make_coordinator(store, hub):
    created = []

    def factory(**kwargs):
        kwargs.setdefault("animation_seconds", 0.2)
        kwargs.setdefault("stale_after_seconds", 12.0)
        kwargs.setdefault("stale_check_interval", 2.0)
        coordinator = SpinCoordinator(store, hub, **kwargs)
        created.append(coordinator)
        return coordinator

    yield factory

    for coordinator in created:
        await coordinator.shutdown()


@pytest.fixture
def drain():
    """取出订阅队列中已有的全部消息"""

    def _drain(subscription):
        messages = []
        while not subscription.queue.empty():
            message = subscription.queue.get_nowait()
            if message is not None:
                messages.append(message)
        return messages

    return _drain


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        DATA_DIR=str(tmp_path / "data"),
        SPIN_ANIMATION_SECONDS=0.3,
        SPIN_STALE_AFTER_SECONDS=5.0,
        SPIN_STALE_CHECK_INTERVAL_SECONDS=0.1,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def client(app_settings):
    app = create_app(app_settings)
    with TestClient(app) as test_client:
        yield test_client
