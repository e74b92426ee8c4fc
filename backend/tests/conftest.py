import pytest
from sqlalchemy.orm import sessionmaker
from base import Base
from config import Settings
from db import build_engine, make_session_factory
from app import create_app
from services.ledger import DiscountLedger
import schema

@pytest.fixture
def engine():
    """In-memory SQLite DB for fast testing."""
    _engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(_engine)
    yield _engine
    Base.metadata.drop_all(_engine)
    _engine.dispose()

@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite DB so concurrent threads get separate connections."""
    _engine = build_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    Base.metadata.create_all(_engine)
    yield _engine
    _engine.dispose()

@pytest.fixture
def db_session(engine):
    """Provides a database session bound to the test engine."""
    TestSession = sessionmaker(bind=engine)
    s = TestSession()
    try:
        yield s
    finally:
        s.close()

@pytest.fixture
def ledger(engine):
    return DiscountLedger(make_session_factory(engine))

@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite:///:memory:", SEED_ON_STARTUP=False)

@pytest.fixture
def app(engine, settings):
    """Provides a Flask app wired to the in-memory test database."""
    flask_app = create_app(settings, engine=engine)
    flask_app.config["TESTING"] = True
    yield flask_app

@pytest.fixture
def client(app):
    """Provides a Flask test client."""
    return app.test_client()
