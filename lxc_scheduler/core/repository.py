# lxc_scheduler/core/repository.py

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from lxc_scheduler.core.models import (
    Container,
    ContainerService,
    ContainerStatus,
    ContainerSummary,
    Host,
)


class HostRepository(ABC):
    """
    Persistence contract for hosts.
    """

    @abstractmethod
    def create(self, host: Host) -> None:
        """
        Persist a new host.
        Must fail with Conflict if the name or ip is taken.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, host_id: UUID) -> Optional[Host]:
        raise NotImplementedError

    @abstractmethod
    def get_by_ip(self, ip: str) -> Optional[Host]:
        raise NotImplementedError

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Host]:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[Host]:
        raise NotImplementedError


class ContainerRepository(ABC):
    """
    Persistence contract for containers.
    """

    @abstractmethod
    def create(self, container: Container) -> None:
        """
        Persist a new container.
        Must fail with StorageError on any constraint violation.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, container_id: UUID) -> Optional[Container]:
        raise NotImplementedError

    @abstractmethod
    def list_summaries(self) -> List[ContainerSummary]:
        """
        Containers joined with their host. Unordered.
        """
        raise NotImplementedError

    @abstractmethod
    def list_by_host(self, host_id: UUID) -> List[Container]:
        raise NotImplementedError

    @abstractmethod
    def transition_status(self, container_id: UUID, new_status: ContainerStatus) -> Container:
        """
        Atomically validate and apply a reported status.
        Raises NotFound or InvalidTransition.
        """
        raise NotImplementedError

    @abstractmethod
    def mark_deleting(self, container_id: UUID) -> Container:
        """
        Move a container to DELETING.
        Raises NotFound.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, container_id: UUID) -> None:
        """
        Remove a container and its service rows in one transaction.
        Raises NotFound.
        """
        raise NotImplementedError


class ContainerServiceRepository(ABC):
    """
    Persistence contract for service port mappings.
    """

    @abstractmethod
    def create(self, service: ContainerService) -> None:
        """
        Persist a new mapping.
        Must fail with Conflict if (container_port, host_port) is taken
        and with NotFound if the container does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def exists(self, container_port: int, host_port: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[ContainerService]:
        raise NotImplementedError

    @abstractmethod
    def list_by_container(self, container_id: UUID) -> List[ContainerService]:
        raise NotImplementedError
