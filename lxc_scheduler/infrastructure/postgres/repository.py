#lxc_scheduler\infrastructure\postgres\repository.py

"""PostgreSQL repository implementation using SQLAlchemy."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lxc_scheduler.core.errors import (
    Conflict,
    InvalidTransition,
    NotFound,
    StorageError,
)
from lxc_scheduler.core.models import (
    Container,
    ContainerService,
    ContainerStatus,
    ContainerSummary,
)
from lxc_scheduler.core.repository import (
    ContainerRepository,
    ContainerServiceRepository,
)
from lxc_scheduler.core.state_machine import ContainerStateMachine
from lxc_scheduler.infrastructure.postgres.models import (
    ContainerORM,
    ContainerServiceORM,
    HostORM,
)

logger = logging.getLogger(__name__)


# ============================================
# Mapping Functions
# ============================================

def orm_to_container(orm: ContainerORM) -> Container:
    """Convert ORM model to domain model."""
    return Container(
        container_id=orm.id,
        name=orm.name,
        alias=orm.alias,
        host_id=orm.lxd_id,
        status=orm.status,
    )


def container_to_orm(container: Container) -> ContainerORM:
    """Convert domain model to ORM model."""
    return ContainerORM(
        id=container.container_id,
        name=container.name,
        alias=container.alias,
        lxd_id=container.host_id,
        status=container.status,
    )


def orm_to_service(orm: ContainerServiceORM) -> ContainerService:
    return ContainerService(
        service_id=orm.id,
        service=orm.service,
        container_id=orm.lxc_id,
        container_port=orm.lxc_port,
        host_id=orm.lxd_id,
        host_port=orm.lxd_port,
        container_name=orm.lxc_name,
        status=orm.status,
    )


def service_to_orm(service: ContainerService) -> ContainerServiceORM:
    return ContainerServiceORM(
        id=service.service_id,
        service=service.service,
        lxc_id=service.container_id,
        lxc_port=service.container_port,
        lxd_id=service.host_id,
        lxd_port=service.host_port,
        lxc_name=service.container_name,
        status=service.status,
    )


# ============================================
# Container Repository
# ============================================

class PostgresContainerRepository(ContainerRepository):
    """Containers, one session per operation."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize repository.

        Args:
            session_factory: SQLAlchemy session factory bound to the pooled engine.
        """
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()

    # -------------------------
    # CREATE
    # -------------------------

    def create(self, container: Container) -> None:
        session = self._get_session()
        try:
            session.add(container_to_orm(container))
            session.commit()
            logger.info(f"[postgres] create lxc {container.container_id} -> done")
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to create container: {e}") from e
        finally:
            session.close()

    # -------------------------
    # READ
    # -------------------------

    def get(self, container_id: UUID) -> Optional[Container]:
        session = self._get_session()
        try:
            orm = session.get(ContainerORM, container_id)
            if orm is None:
                return None
            return orm_to_container(orm)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read container: {e}") from e
        finally:
            session.close()

    def list_summaries(self) -> List[ContainerSummary]:
        session = self._get_session()
        try:
            rows = (
                session.query(
                    ContainerORM.id,
                    ContainerORM.name,
                    HostORM.name,
                    ContainerORM.alias,
                    ContainerORM.status,
                )
                .join(HostORM, ContainerORM.lxd_id == HostORM.id)
                .all()
            )
            return [
                ContainerSummary(
                    container_id=container_id,
                    container_name=container_name,
                    host_name=host_name,
                    image=image,
                    status=status,
                )
                for container_id, container_name, host_name, image, status in rows
            ]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list containers: {e}") from e
        finally:
            session.close()

    def list_by_host(self, host_id: UUID) -> List[Container]:
        session = self._get_session()
        try:
            orms = session.query(ContainerORM).filter(ContainerORM.lxd_id == host_id).all()
            return [orm_to_container(orm) for orm in orms]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list containers for host {host_id}: {e}") from e
        finally:
            session.close()

    # -------------------------
    # STATUS
    # -------------------------

    def _lock(self, session: Session, container_id: UUID) -> ContainerORM:
        orm = session.query(ContainerORM).filter(
            ContainerORM.id == container_id
        ).with_for_update().first()

        if orm is None:
            raise NotFound(f"container {container_id} not found")
        return orm

    def transition_status(self, container_id: UUID, new_status: ContainerStatus) -> Container:
        session = self._get_session()
        try:
            orm = self._lock(session, container_id)

            container = ContainerStateMachine.transition(orm_to_container(orm), new_status)
            orm.status = container.status

            session.commit()
            return container
        except (NotFound, InvalidTransition):
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to update container status: {e}") from e
        finally:
            session.close()

    def mark_deleting(self, container_id: UUID) -> Container:
        session = self._get_session()
        try:
            orm = self._lock(session, container_id)

            container = ContainerStateMachine.begin_delete(orm_to_container(orm))
            orm.status = container.status

            session.commit()
            return container
        except NotFound:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to mark container deleting: {e}") from e
        finally:
            session.close()

    # -------------------------
    # DELETE
    # -------------------------

    def delete(self, container_id: UUID) -> None:
        session = self._get_session()
        try:
            orm = self._lock(session, container_id)

            # explicit so the cascade holds on backends without FK enforcement
            removed = session.query(ContainerServiceORM).filter(
                ContainerServiceORM.lxc_id == container_id
            ).delete(synchronize_session=False)
            session.delete(orm)

            session.commit()
            logger.info(f"[postgres] delete lxc {container_id} -> done ({removed} services)")
        except NotFound:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to delete container: {e}") from e
        finally:
            session.close()


def is_port_pair_violation(reason: str) -> bool:
    """Postgres names the constraint, SQLite names the columns."""
    return "uq_lxc_services_ports" in reason or "lxc_services.lxc_port" in reason


# ============================================
# Service Port Repository
# ============================================

class PostgresContainerServiceRepository(ContainerServiceRepository):
    """Service port mappings."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()

    def create(self, service: ContainerService) -> None:
        session = self._get_session()
        try:
            session.add(service_to_orm(service))
            session.commit()
            logger.info(f"[postgres] create lxc_service {service.service_id} -> done")
        except IntegrityError as e:
            session.rollback()
            reason = str(e.orig).lower()
            if is_port_pair_violation(reason):
                raise Conflict(
                    f"service port pair {service.container_port}/{service.host_port} already in use"
                ) from e
            if "foreign key" in reason:
                raise NotFound(f"container {service.container_id} not found") from e
            raise StorageError(f"Failed to create service: {e}") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to create service: {e}") from e
        finally:
            session.close()

    def exists(self, container_port: int, host_port: int) -> bool:
        session = self._get_session()
        try:
            return session.query(ContainerServiceORM.id).filter(
                ContainerServiceORM.lxc_port == container_port,
                ContainerServiceORM.lxd_port == host_port,
            ).first() is not None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to look up service ports: {e}") from e
        finally:
            session.close()

    def list_all(self) -> List[ContainerService]:
        session = self._get_session()
        try:
            return [orm_to_service(orm) for orm in session.query(ContainerServiceORM).all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list services: {e}") from e
        finally:
            session.close()

    def list_by_container(self, container_id: UUID) -> List[ContainerService]:
        session = self._get_session()
        try:
            orms = session.query(ContainerServiceORM).filter(
                ContainerServiceORM.lxc_id == container_id
            ).all()
            return [orm_to_service(orm) for orm in orms]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list services for {container_id}: {e}") from e
        finally:
            session.close()
