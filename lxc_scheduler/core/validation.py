#lxc_scheduler\core\validation.py
from uuid import UUID

from lxc_scheduler.core.errors import BadInput
from lxc_scheduler.core.models import ContainerStatus

MIN_PORT = 1
MAX_PORT = 65535


def validate_port(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise BadInput(f"{field_name} must be an integer")

    try:
        port = int(value)
    except (TypeError, ValueError):
        raise BadInput(f"{field_name} must be an integer") from None

    if isinstance(value, float) and value != port:
        raise BadInput(f"{field_name} must be an integer")

    if not MIN_PORT <= port <= MAX_PORT:
        raise BadInput(f"{field_name} must be between {MIN_PORT} and {MAX_PORT}")

    return port


def parse_status(value) -> ContainerStatus:
    if isinstance(value, ContainerStatus):
        return value

    try:
        return ContainerStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ContainerStatus)
        raise BadInput(f"unknown status {value!r} (expected one of: {allowed})") from None


def require_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BadInput(f"{field_name} is required")
    return value


def parse_uuid(value, field_name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise BadInput(f"{field_name} must be a UUID") from None
