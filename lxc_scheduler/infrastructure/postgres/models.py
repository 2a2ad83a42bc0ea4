#lxc_scheduler\infrastructure\postgres\models.py
"""SQLAlchemy ORM models for database tables."""

from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Enum as SQLEnum, ForeignKey, Index, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship

from lxc_scheduler.core.models import ContainerStatus, ServiceStatus
from lxc_scheduler.infrastructure.postgres.database import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ============================================
# HOSTS
# ============================================

class HostORM(Base):
    """Host table."""

    __tablename__ = "lxd"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False, unique=True)
    ip = Column(String(64), nullable=False, unique=True)

    containers = relationship("ContainerORM", back_populates="host")

    def __repr__(self) -> str:
        return f"<HostORM(id={self.id}, name={self.name}, ip={self.ip})>"


# ============================================
# CONTAINERS
# ============================================

class ContainerORM(Base):
    """
    Container table.

    Status is stored as its lowercase text value.
    """

    __tablename__ = "lxc"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    alias = Column(String(255), nullable=False)

    lxd_id = Column(Uuid, ForeignKey("lxd.id"), nullable=False)

    status = Column(
        SQLEnum(
            ContainerStatus,
            name="lxc_status",
            native_enum=False,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
        default=ContainerStatus.CREATING,
    )

    host = relationship("HostORM", back_populates="containers")
    services = relationship(
        "ContainerServiceORM",
        back_populates="container",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_lxc_lxd_id", "lxd_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ContainerORM(id={self.id}, name={self.name}, "
            f"status={self.status.value})>"
        )


# ============================================
# SERVICE PORTS
# ============================================

class ContainerServiceORM(Base):
    """Container service port mapping table."""

    __tablename__ = "lxc_services"

    id = Column(Uuid, primary_key=True, default=uuid4)
    service = Column(String(255), nullable=False)

    lxc_id = Column(Uuid, ForeignKey("lxc.id", ondelete="CASCADE"), nullable=False)
    lxc_port = Column(Integer, nullable=False)

    lxd_id = Column(Uuid, ForeignKey("lxd.id"), nullable=False)
    lxd_port = Column(Integer, nullable=False)

    lxc_name = Column(String(255), nullable=False)

    status = Column(
        SQLEnum(
            ServiceStatus,
            name="lxc_service_status",
            native_enum=False,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
        default=ServiceStatus.CREATING,
    )

    container = relationship("ContainerORM", back_populates="services")

    __table_args__ = (
        UniqueConstraint("lxc_port", "lxd_port", name="uq_lxc_services_ports"),
        Index("ix_lxc_services_lxc_id", "lxc_id"),
    )
