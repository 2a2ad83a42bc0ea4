"""Scheduler service - placement and container lifecycle."""

import logging
from typing import List, Optional, Union
from uuid import UUID, uuid4

from lxc_scheduler.agent.client import AgentClient
from lxc_scheduler.core.errors import (
    AgentError,
    Conflict,
    InvalidTransition,
    NotFound,
    PlacementFailed,
)
from lxc_scheduler.core.models import (
    Container,
    ContainerService,
    ContainerStatus,
    ContainerSummary,
    Host,
    ServiceStatus,
)
from lxc_scheduler.core.repository import (
    ContainerRepository,
    ContainerServiceRepository,
    HostRepository,
)
from lxc_scheduler.core.state_machine import REPORTABLE_STATUSES
from lxc_scheduler.core.validation import (
    parse_status,
    parse_uuid,
    require_text,
    validate_port,
)
from lxc_scheduler.metrics.source import MetricsSource

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Sole writer of container and service port state.

    Agent dispatch is off unless `dispatch_to_agent` is set; without it the
    service only records intent and externally reported status.
    """

    def __init__(
        self,
        host_repo: HostRepository,
        container_repo: ContainerRepository,
        service_repo: ContainerServiceRepository,
        metrics_source: MetricsSource,
        agent_client: Optional[AgentClient] = None,
        dispatch_to_agent: bool = False,
    ):
        self._host_repo = host_repo
        self._container_repo = container_repo
        self._service_repo = service_repo
        self._metrics = metrics_source
        self._agent = agent_client
        self._dispatch = dispatch_to_agent and agent_client is not None

    # -------------------------
    # CREATE
    # -------------------------

    def create_container(self, name: str, alias: str) -> Container:
        """Place a new container on the least loaded host and record it."""
        require_text(name, "name")
        require_text(alias, "alias")

        address = self._metrics.get_lowest_load_host()

        host = self._host_repo.get_by_ip(address.ip)
        if host is None:
            logger.warning(f"[scheduler] placement failed: no host registered with ip {address.ip}")
            raise PlacementFailed(f"no registered host with ip {address.ip}")

        container = Container(
            container_id=uuid4(),
            name=name,
            alias=alias,
            host_id=host.host_id,
            status=ContainerStatus.CREATING,
        )

        self._container_repo.create(container)
        logger.info(f"[scheduler] placed container {container.container_id} ({name}) on {host.name}")

        if self._dispatch:
            self._dispatch_create(host, container)

        return container

    def _dispatch_create(self, host: Host, container: Container) -> None:
        try:
            operation = self._agent.create_container(host, container)
        except AgentError:
            logger.warning(f"[scheduler] agent create failed for {container.container_id}")
            self._container_repo.transition_status(container.container_id, ContainerStatus.FAILED)
            container.status = ContainerStatus.FAILED
            raise

        if operation.is_failed():
            logger.warning(
                f"[scheduler] agent operation {operation.id} failed for {container.container_id}"
            )
            self._container_repo.transition_status(container.container_id, ContainerStatus.FAILED)
            container.status = ContainerStatus.FAILED

    # -------------------------
    # UPDATE STATUS
    # -------------------------

    def update_container_status(
        self,
        container_id: Union[UUID, str],
        status: Union[ContainerStatus, str],
    ) -> Container:
        """Apply an externally reported status."""
        container_id = parse_uuid(container_id, "id")
        new_status = parse_status(status)

        if new_status not in REPORTABLE_STATUSES:
            raise InvalidTransition(
                f"status {new_status.value} cannot be reported, "
                f"expected one of: running, stopped, failed"
            )

        container = self._container_repo.transition_status(container_id, new_status)
        logger.info(f"[scheduler] container {container_id} -> {container.status.value}")
        return container

    # -------------------------
    # DELETE
    # -------------------------

    def delete_container(self, container_id: Union[UUID, str]) -> None:
        """Mark the container DELETING, then remove it and its service rows."""
        container_id = parse_uuid(container_id, "id")

        container = self._container_repo.mark_deleting(container_id)

        if self._dispatch:
            host = self._host_repo.get(container.host_id)
            if host is None:
                raise NotFound(f"host {container.host_id} not found")
            # on failure the row stays DELETING and the delete can be retried
            operation = self._agent.delete_container(host, container)
            if operation.is_failed():
                raise AgentError(
                    f"agent operation {operation.id} failed to delete container {container_id}"
                )

        self._container_repo.delete(container_id)
        logger.info(f"[scheduler] deleted container {container_id}")

    # -------------------------
    # READ
    # -------------------------

    def list_containers(self) -> List[ContainerSummary]:
        return self._container_repo.list_summaries()

    def get_container(self, container_id: Union[UUID, str]) -> Container:
        container_id = parse_uuid(container_id, "id")
        container = self._container_repo.get(container_id)
        if container is None:
            raise NotFound(f"container {container_id} not found")
        return container

    def list_containers_on_host(self, host_name: str) -> List[Container]:
        host = self._host_repo.get_by_name(host_name)
        if host is None:
            raise NotFound(f"host {host_name} not found")
        return self._container_repo.list_by_host(host.host_id)

    # -------------------------
    # HOSTS
    # -------------------------

    def register_host(self, name: str, ip: str) -> Host:
        """Record a host provisioned out of band."""
        require_text(name, "name")
        require_text(ip, "ip")

        host = Host(host_id=uuid4(), name=name, ip=ip)
        self._host_repo.create(host)
        logger.info(f"[scheduler] registered host {host.host_id} ({name}, {ip})")
        return host

    def list_hosts(self) -> List[Host]:
        return self._host_repo.list_all()

    # -------------------------
    # SERVICE PORTS
    # -------------------------

    def add_container_service(
        self,
        service: str,
        container_id: Union[UUID, str],
        container_port: int,
        host_port: int,
    ) -> ContainerService:
        """Expose a port of a container on its host."""
        require_text(service, "service")
        container_id = parse_uuid(container_id, "container_id")
        container_port = validate_port(container_port, "container_port")
        host_port = validate_port(host_port, "host_port")

        container = self._container_repo.get(container_id)
        if container is None:
            raise NotFound(f"container {container_id} not found")

        if container.status == ContainerStatus.DELETING:
            raise Conflict(f"container {container_id} is being deleted")

        if self._service_repo.exists(container_port, host_port):
            raise Conflict(
                f"service port pair {container_port}/{host_port} already in use"
            )

        record = ContainerService(
            service_id=uuid4(),
            service=service,
            container_id=container.container_id,
            container_port=container_port,
            host_id=container.host_id,
            host_port=host_port,
            container_name=container.name,
            status=ServiceStatus.CREATING,
        )
        self._service_repo.create(record)
        logger.info(
            f"[scheduler] service {service} {container.name}:{container_port} -> host port {host_port}"
        )
        return record

    def list_container_services(self) -> List[ContainerService]:
        return self._service_repo.list_all()
