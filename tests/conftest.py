"""Shared fixtures: an in-memory SQLite database per test."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import init_db
from services import InMemoryObjectRepository, SqlObjectRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
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
def repository(db):
    return SqlObjectRepository(db)


@pytest.fixture
def memory_repository():
    return InMemoryObjectRepository()


def _seed(repository):
    """A small, realistic set of live objects."""
    repository.upsert("datafield", "port", {"varname": "port", "caption": "Port", "datatype": "string"})
    repository.upsert("command", "plugin-check", {"command": "/usr/lib/nagios/plugins"}, "template")
    repository.upsert("command", "check_ping", {"command": "check_ping", "imports": ["plugin-check"]}, "object")
    repository.upsert("command", "check_http", {"command": "check_http", "imports": ["plugin-check"]}, "object")
    repository.upsert(
        "host", "generic-host",
        {"check_command": "check_ping", "fields": [{"datafield_id": "port", "is_required": "n"}]},
        "template"
    )
    repository.upsert("hostgroup", "linux", {"display_name": "Linux Hosts"})


@pytest.fixture
def seeded_repository(repository):
    _seed(repository)
    return repository


@pytest.fixture
def seeded_memory_repository(memory_repository):
    _seed(memory_repository)
    return memory_repository
