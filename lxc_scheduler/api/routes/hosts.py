# lxc_scheduler/api/routes/hosts.py
"""Host API routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from lxc_scheduler.api.dependencies import get_scheduler
from lxc_scheduler.api.schemas.container import (
    ContainerResponse,
    HostRegisterRequest,
    HostResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["lxd"])


@router.post("/lxd", response_model=HostResponse)
def register_host(
    request: HostRegisterRequest,
    scheduler=Depends(get_scheduler),
):
    """
    Register a host.

    Hosts are provisioned out of band; this only records them.
    """
    host = scheduler.register_host(name=request.name, ip=request.ip)
    return HostResponse.from_domain(host)


@router.get("/lxd", response_model=List[HostResponse])
def list_hosts(scheduler=Depends(get_scheduler)):
    return [HostResponse.from_domain(host) for host in scheduler.list_hosts()]


@router.get("/lxd/{lxd_name}/lxc", response_model=List[ContainerResponse])
def list_containers_on_host(
    lxd_name: str,
    scheduler=Depends(get_scheduler),
):
    logger.info("-- Got get lxc by lxd name request --")
    return [
        ContainerResponse.from_domain(container)
        for container in scheduler.list_containers_on_host(lxd_name)
    ]
