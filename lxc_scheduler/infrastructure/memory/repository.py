# lxc_scheduler/infrastructure/memory/repository.py

from dataclasses import replace
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from lxc_scheduler.core.errors import Conflict, NotFound, StorageError
from lxc_scheduler.core.models import (
    Container,
    ContainerService,
    ContainerStatus,
    ContainerSummary,
    Host,
)
from lxc_scheduler.core.repository import (
    ContainerRepository,
    ContainerServiceRepository,
    HostRepository,
)
from lxc_scheduler.core.state_machine import ContainerStateMachine


class InMemoryStore:
    """Shared tables so the repositories can enforce foreign keys."""

    def __init__(self):
        self.hosts: Dict[UUID, Host] = {}
        self.containers: Dict[UUID, Container] = {}
        self.services: Dict[UUID, ContainerService] = {}
        self.lock = Lock()


class InMemoryHostRepository(HostRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def create(self, host: Host) -> None:
        with self._store.lock:
            for existing in self._store.hosts.values():
                if existing.name == host.name or existing.ip == host.ip:
                    raise Conflict(f"Host {host.name} ({host.ip}) already exists")
            self._store.hosts[host.host_id] = replace(host)

    def get(self, host_id: UUID) -> Optional[Host]:
        host = self._store.hosts.get(host_id)
        return replace(host) if host else None

    def get_by_ip(self, ip: str) -> Optional[Host]:
        for host in list(self._store.hosts.values()):
            if host.ip == ip:
                return replace(host)
        return None

    def get_by_name(self, name: str) -> Optional[Host]:
        for host in list(self._store.hosts.values()):
            if host.name == name:
                return replace(host)
        return None

    def list_all(self) -> List[Host]:
        return sorted((replace(h) for h in self._store.hosts.values()), key=lambda h: h.name)


class InMemoryContainerRepository(ContainerRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def create(self, container: Container) -> None:
        with self._store.lock:
            if container.container_id in self._store.containers:
                raise StorageError(f"Container {container.container_id} already exists")
            if container.host_id not in self._store.hosts:
                raise StorageError(f"Host {container.host_id} does not exist")
            self._store.containers[container.container_id] = replace(container)

    def get(self, container_id: UUID) -> Optional[Container]:
        container = self._store.containers.get(container_id)
        return replace(container) if container else None

    def list_summaries(self) -> List[ContainerSummary]:
        with self._store.lock:
            return [
                ContainerSummary(
                    container_id=c.container_id,
                    container_name=c.name,
                    host_name=self._store.hosts[c.host_id].name,
                    image=c.alias,
                    status=c.status,
                )
                for c in self._store.containers.values()
            ]

    def list_by_host(self, host_id: UUID) -> List[Container]:
        return [
            replace(c) for c in list(self._store.containers.values())
            if c.host_id == host_id
        ]

    def _require(self, container_id: UUID) -> Container:
        container = self._store.containers.get(container_id)
        if not container:
            raise NotFound(f"container {container_id} not found")
        return container

    def transition_status(self, container_id: UUID, new_status: ContainerStatus) -> Container:
        with self._store.lock:
            container = self._require(container_id)
            ContainerStateMachine.transition(container, new_status)
            return replace(container)

    def mark_deleting(self, container_id: UUID) -> Container:
        with self._store.lock:
            container = self._require(container_id)
            ContainerStateMachine.begin_delete(container)
            return replace(container)

    def delete(self, container_id: UUID) -> None:
        with self._store.lock:
            self._require(container_id)
            for service_id, service in list(self._store.services.items()):
                if service.container_id == container_id:
                    del self._store.services[service_id]
            del self._store.containers[container_id]


class InMemoryContainerServiceRepository(ContainerServiceRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def create(self, service: ContainerService) -> None:
        with self._store.lock:
            if service.container_id not in self._store.containers:
                raise NotFound(f"container {service.container_id} not found")
            for existing in self._store.services.values():
                if (existing.container_port, existing.host_port) == (service.container_port, service.host_port):
                    raise Conflict(
                        f"service port pair {service.container_port}/{service.host_port} already in use"
                    )
            self._store.services[service.service_id] = replace(service)

    def exists(self, container_port: int, host_port: int) -> bool:
        return any(
            s.container_port == container_port and s.host_port == host_port
            for s in list(self._store.services.values())
        )

    def list_all(self) -> List[ContainerService]:
        return [replace(s) for s in list(self._store.services.values())]

    def list_by_container(self, container_id: UUID) -> List[ContainerService]:
        return [
            replace(s) for s in list(self._store.services.values())
            if s.container_id == container_id
        ]
