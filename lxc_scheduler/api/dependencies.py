#lxc_scheduler\api\dependencies.py
from fastapi import Request

from lxc_scheduler.core.service import SchedulerService


def get_scheduler(request: Request) -> SchedulerService:
    return request.app.state.scheduler
