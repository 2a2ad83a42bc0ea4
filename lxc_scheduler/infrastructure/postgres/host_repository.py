"""Host repository."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lxc_scheduler.core.errors import Conflict, StorageError
from lxc_scheduler.core.models import Host
from lxc_scheduler.core.repository import HostRepository
from lxc_scheduler.infrastructure.postgres.models import HostORM

logger = logging.getLogger(__name__)


def host_to_orm(host: Host) -> HostORM:
    return HostORM(id=host.host_id, name=host.name, ip=host.ip)


def orm_to_host(orm: HostORM) -> Host:
    return Host(host_id=orm.id, name=orm.name, ip=orm.ip)


class PostgresHostRepository(HostRepository):
    """Repository for hosts."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()

    def create(self, host: Host) -> None:
        """Register a new host."""
        session = self._get_session()
        try:
            session.add(host_to_orm(host))
            session.commit()
            logger.info(f"[host_repo] registered host {host.host_id} ({host.name})")
        except IntegrityError as e:
            session.rollback()
            raise Conflict(f"Host {host.name} ({host.ip}) already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to register host: {e}") from e
        finally:
            session.close()

    def get(self, host_id: UUID) -> Optional[Host]:
        return self._get_one(HostORM.id == host_id)

    def get_by_ip(self, ip: str) -> Optional[Host]:
        return self._get_one(HostORM.ip == ip)

    def get_by_name(self, name: str) -> Optional[Host]:
        return self._get_one(HostORM.name == name)

    def _get_one(self, criterion) -> Optional[Host]:
        session = self._get_session()
        try:
            orm = session.query(HostORM).filter(criterion).first()
            if not orm:
                return None
            return orm_to_host(orm)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read host: {e}") from e
        finally:
            session.close()

    def list_all(self) -> List[Host]:
        session = self._get_session()
        try:
            return [orm_to_host(orm) for orm in session.query(HostORM).order_by(HostORM.name).all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list hosts: {e}") from e
        finally:
            session.close()
