from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from lxc_scheduler.core.models import (
    Container,
    ContainerService,
    ContainerSummary,
    Host,
)


# ============================================
# REQUESTS
# ============================================

class ContainerCreateRequest(BaseModel):
    # other descriptive fields are accepted and ignored
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    alias: str = Field(..., min_length=1)


class ContainerStatusUpdateRequest(BaseModel):
    id: UUID
    status: str


class ContainerDeleteRequest(BaseModel):
    id: UUID


class HostRegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    ip: str = Field(..., min_length=1, max_length=64)


class ContainerServiceCreateRequest(BaseModel):
    service: str = Field(..., min_length=1)
    container_id: UUID
    container_port: int = Field(..., ge=1, le=65535)
    host_port: int = Field(..., ge=1, le=65535)


# ============================================
# RESPONSES
# ============================================

class MessageResponse(BaseModel):
    message: str


class ContainerResponse(BaseModel):
    id: UUID
    name: str
    alias: str
    host_id: UUID
    status: str

    @classmethod
    def from_domain(cls, container: Container) -> "ContainerResponse":
        return cls(
            id=container.container_id,
            name=container.name,
            alias=container.alias,
            host_id=container.host_id,
            status=container.status.value,
        )


class ContainerSummaryResponse(BaseModel):
    id: UUID
    container_name: str
    host_name: str
    image: str
    status: str

    @classmethod
    def from_domain(cls, summary: ContainerSummary) -> "ContainerSummaryResponse":
        return cls(
            id=summary.container_id,
            container_name=summary.container_name,
            host_name=summary.host_name,
            image=summary.image,
            status=summary.status.value,
        )


class HostResponse(BaseModel):
    id: UUID
    name: str
    ip: str

    @classmethod
    def from_domain(cls, host: Host) -> "HostResponse":
        return cls(id=host.host_id, name=host.name, ip=host.ip)


class ContainerServiceResponse(BaseModel):
    id: UUID
    service: str
    container_id: UUID
    container_port: int
    host_id: UUID
    host_port: int
    container_name: str
    status: str

    @classmethod
    def from_domain(cls, record: ContainerService) -> "ContainerServiceResponse":
        return cls(
            id=record.service_id,
            service=record.service,
            container_id=record.container_id,
            container_port=record.container_port,
            host_id=record.host_id,
            host_port=record.host_port,
            container_name=record.container_name,
            status=record.status.value,
        )
