import pytest
from sqlalchemy import create_engine, select

from gridfilter.core.config import get_settings
from gridfilter.core.filters import FilterEngine
from tests.helpers import Base, User


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test so env overrides do not leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def users_query():
    """Plain select of the users table."""
    return select(User)


@pytest.fixture
def filter_engine(users_query):
    """Case-sensitive filter engine over users, for readable LIKE assertions."""
    return FilterEngine(users_query, case_insensitive=False)


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite database with the test tables created."""
    db_engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()
