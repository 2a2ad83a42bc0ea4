# lxc_scheduler/api/routes/containers.py
"""Container API routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from lxc_scheduler.api.dependencies import get_scheduler
from lxc_scheduler.api.schemas.container import (
    ContainerCreateRequest,
    ContainerDeleteRequest,
    ContainerResponse,
    ContainerStatusUpdateRequest,
    ContainerSummaryResponse,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["lxc"])


@router.post("/lxc", response_model=ContainerResponse)
def create_container(
    request: ContainerCreateRequest,
    scheduler=Depends(get_scheduler),
):
    """Place a new container on the least loaded host."""
    logger.info("-- Got new create lxc request --")
    container = scheduler.create_container(name=request.name, alias=request.alias)
    return ContainerResponse.from_domain(container)


@router.get("/lxc", response_model=List[ContainerSummaryResponse])
def list_containers(scheduler=Depends(get_scheduler)):
    return [
        ContainerSummaryResponse.from_domain(summary)
        for summary in scheduler.list_containers()
    ]


@router.put("/lxc", response_model=MessageResponse)
def update_container_status(
    request: ContainerStatusUpdateRequest,
    scheduler=Depends(get_scheduler),
):
    logger.info("-- Got update lxc status by id request --")
    scheduler.update_container_status(request.id, request.status)
    return MessageResponse(message="success updating lxc state")


@router.delete("/lxc", response_model=MessageResponse)
def delete_container(
    request: ContainerDeleteRequest,
    scheduler=Depends(get_scheduler),
):
    logger.info("-- Got delete lxc request --")
    scheduler.delete_container(request.id)
    return MessageResponse(message="delete lxc success")
