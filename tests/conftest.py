#tests\conftest.py

"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from lxc_scheduler.api.main import create_app
from lxc_scheduler.core.service import SchedulerService
from lxc_scheduler.infrastructure.memory.repository import (
    InMemoryContainerRepository,
    InMemoryContainerServiceRepository,
    InMemoryHostRepository,
    InMemoryStore,
)
from lxc_scheduler.infrastructure.postgres.database import (
    drop_db,
    get_session_factory,
    init_db,
    register_connect_listeners,
)
from lxc_scheduler.infrastructure.postgres.host_repository import PostgresHostRepository
from lxc_scheduler.infrastructure.postgres.repository import (
    PostgresContainerRepository,
    PostgresContainerServiceRepository,
)
from lxc_scheduler.metrics.source import StaticMetricsSource


# ============================================
# DATABASE
# ============================================

@pytest.fixture
def test_engine():
    """
    Fresh schema per test.

    SQLite in memory unless TEST_DATABASE_URL points at a real server.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if url:
        engine = create_engine(url, echo=False)
    else:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    register_connect_listeners(engine)
    init_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return get_session_factory(test_engine)


@pytest.fixture
def host_repository(test_session_factory):
    return PostgresHostRepository(test_session_factory)


@pytest.fixture
def container_repository(test_session_factory):
    return PostgresContainerRepository(test_session_factory)


@pytest.fixture
def service_repository(test_session_factory):
    return PostgresContainerServiceRepository(test_session_factory)


# ============================================
# COLLABORATORS
# ============================================

@pytest.fixture
def metrics():
    """Metrics source with no samples; tests set loads as needed."""
    return StaticMetricsSource()


# ============================================
# SERVICES
# ============================================

@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def scheduler(store, metrics):
    """Scheduler over in-memory repositories."""
    return SchedulerService(
        host_repo=InMemoryHostRepository(store),
        container_repo=InMemoryContainerRepository(store),
        service_repo=InMemoryContainerServiceRepository(store),
        metrics_source=metrics,
    )


@pytest.fixture
def db_scheduler(host_repository, container_repository, service_repository, metrics):
    """Scheduler over the SQL repositories."""
    return SchedulerService(
        host_repo=host_repository,
        container_repo=container_repository,
        service_repo=service_repository,
        metrics_source=metrics,
    )


@pytest.fixture
def client(db_scheduler):
    with TestClient(create_app(db_scheduler)) as test_client:
        yield test_client
