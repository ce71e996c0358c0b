import pytest
from fastapi.testclient import TestClient

from app.database import create_db_engine, create_session_factory
from app.dependencies import get_gateway, get_uploader
from app.main import create_app


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test_images.db'}"


@pytest.fixture
def env(monkeypatch, database_url):
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("RAZORPAY_KEY_ID", "rzp_test_key")
    monkeypatch.setenv("RAZORPAY_KEY_SECRET", "rzp_test_secret")
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setenv("CLOUDINARY_API_KEY", "123")
    monkeypatch.setenv("CLOUDINARY_API_SECRET", "abc")
    monkeypatch.delenv("CAPTURE_DEDUP", raising=False)
    monkeypatch.delenv("MAX_BODY_BYTES", raising=False)


@pytest.fixture
def fastapi_app(env):
    return create_app()


@pytest.fixture
def gateway(mocker):
    return mocker.Mock()


@pytest.fixture
def uploader(mocker):
    return mocker.Mock()


@pytest.fixture
def client(fastapi_app, gateway, uploader):
    # Mock external clients, keep the real SQLite store
    fastapi_app.dependency_overrides[get_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_uploader] = lambda: uploader
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def TestingSessionLocal(database_url):
    engine = create_db_engine(database_url)
    yield create_session_factory(engine)
    engine.dispose()
