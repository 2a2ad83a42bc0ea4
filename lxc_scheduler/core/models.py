"""Core domain models (hosts, containers, service port mappings)."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class ContainerStatus(Enum):
    """Container lifecycle status."""

    CREATING = "creating"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"
    DELETING = "deleting"


class ServiceStatus(Enum):
    """Service port mapping status."""

    CREATING = "creating"
    ACTIVE = "active"
    REMOVING = "removing"


@dataclass
class Host:
    """Machine running a container runtime (lxd)."""
    host_id: UUID
    name: str
    ip: str


@dataclass
class Container:
    """Managed container instance (lxc)."""

    # Identity
    container_id: UUID
    name: str
    alias: str

    # Placement
    host_id: UUID

    # State
    status: ContainerStatus = ContainerStatus.CREATING


@dataclass
class ContainerSummary:
    """Container joined with its host, as returned by the fleet listing."""
    container_id: UUID
    container_name: str
    host_name: str
    image: str
    status: ContainerStatus


@dataclass
class ContainerService:
    """Port mapping from a service inside a container to a host port."""

    service_id: UUID
    service: str

    # Inside address
    container_id: UUID
    container_port: int

    # Outside address
    host_id: UUID
    host_port: int

    container_name: str
    status: ServiceStatus = ServiceStatus.CREATING
