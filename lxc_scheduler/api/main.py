from fastapi import FastAPI, Request

from lxc_scheduler.api.errors import register_exception_handlers
from lxc_scheduler.api.routes.containers import router as containers_router
from lxc_scheduler.api.routes.hosts import router as hosts_router
from lxc_scheduler.api.routes.services import router as services_router
from lxc_scheduler.config import SchedulerSettings
from lxc_scheduler.core.service import SchedulerService
from lxc_scheduler.infrastructure.postgres.config import DatabaseSettings
from lxc_scheduler.infrastructure.postgres.database import create_db_engine
from lxc_scheduler.wiring import build_scheduler


def create_app(scheduler: SchedulerService) -> FastAPI:
    app = FastAPI(title="LXC Scheduler API")
    app.state.scheduler = scheduler

    register_exception_handlers(app)

    @app.middleware("http")
    async def allow_any_origin(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(containers_router)
    app.include_router(hosts_router)
    app.include_router(services_router)

    return app


def app_from_env() -> FastAPI:
    """Factory for `uvicorn --factory lxc_scheduler.api.main:app_from_env`."""
    settings = SchedulerSettings()
    engine = create_db_engine(DatabaseSettings())
    return create_app(build_scheduler(settings, engine))
