# lxc_scheduler/api/routes/services.py
"""Service port mapping API routes."""

from typing import List

from fastapi import APIRouter, Depends

from lxc_scheduler.api.dependencies import get_scheduler
from lxc_scheduler.api.schemas.container import (
    ContainerServiceCreateRequest,
    ContainerServiceResponse,
)

router = APIRouter(prefix="/api/v1", tags=["lxc_services"])


@router.post("/lxc_services", response_model=ContainerServiceResponse)
def add_container_service(
    request: ContainerServiceCreateRequest,
    scheduler=Depends(get_scheduler),
):
    record = scheduler.add_container_service(
        service=request.service,
        container_id=request.container_id,
        container_port=request.container_port,
        host_port=request.host_port,
    )
    return ContainerServiceResponse.from_domain(record)


@router.get("/lxc_services", response_model=List[ContainerServiceResponse])
def list_container_services(scheduler=Depends(get_scheduler)):
    return [
        ContainerServiceResponse.from_domain(record)
        for record in scheduler.list_container_services()
    ]
