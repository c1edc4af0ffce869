import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from securetrack.database import create_memory_engine, get_db, init_db
from securetrack.main import app
from securetrack.seed import seed_demo_data


@pytest.fixture(autouse=True)
def app_timezone(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "America/Sao_Paulo")


@pytest.fixture
def engine():
    """Base mémoire isolée pour chaque test"""
    engine = create_memory_engine()
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seeded_db(db):
    seed_demo_data(db)
    return db


@pytest.fixture
def client(session_factory, monkeypatch):
    monkeypatch.setenv("SEED_DEMO_DATA", "false")
    session = session_factory()
    seed_demo_data(session)
    session.close()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
