#lxc_scheduler\wiring.py

"""Wires repositories, collaborators and the scheduler service together."""

from sqlalchemy.engine import Engine

from lxc_scheduler.agent.client import AgentClient
from lxc_scheduler.config import SchedulerSettings
from lxc_scheduler.core.service import SchedulerService
from lxc_scheduler.infrastructure.postgres.database import get_session_factory
from lxc_scheduler.infrastructure.postgres.host_repository import PostgresHostRepository
from lxc_scheduler.infrastructure.postgres.repository import (
    PostgresContainerRepository,
    PostgresContainerServiceRepository,
)
from lxc_scheduler.metrics.source import PrometheusMetricsSource


def build_scheduler(settings: SchedulerSettings, engine: Engine) -> SchedulerService:
    session_factory = get_session_factory(engine)

    # ============================================
    # REPOSITORIES
    # ============================================
    host_repository = PostgresHostRepository(session_factory)
    container_repository = PostgresContainerRepository(session_factory)
    service_repository = PostgresContainerServiceRepository(session_factory)

    # ============================================
    # COLLABORATORS
    # ============================================
    metrics_source = PrometheusMetricsSource(
        base_url=settings.prometheus_url,
        query=settings.metrics_query,
        poll_interval=settings.metrics_poll_interval,
        timeout=settings.metrics_timeout,
    )
    agent_client = AgentClient(
        agent_port=settings.agent_port,
        timeout=settings.agent_timeout,
        scheme=settings.agent_scheme,
    )

    return SchedulerService(
        host_repo=host_repository,
        container_repo=container_repository,
        service_repo=service_repository,
        metrics_source=metrics_source,
        agent_client=agent_client,
        dispatch_to_agent=settings.agent_dispatch_enabled,
    )
