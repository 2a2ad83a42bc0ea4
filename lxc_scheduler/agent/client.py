# lxc_scheduler/agent/client.py
"""
Client for the agents running on each host.

Calls are synchronous and bounded only by the request timeout. A client
disconnecting from the API does not cancel an agent call already in flight.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from lxc_scheduler.core.errors import (
    AgentDecodeError,
    AgentResponseError,
    AgentTransportError,
)
from lxc_scheduler.core.models import Container, Host

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

FAILED_OPERATION_STATUSES = {"failure", "failed", "cancelled"}


@dataclass
class Operation:
    """Asynchronous unit of work reported by a host agent."""
    id: str
    status: str
    status_code: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "Operation":
        """
        Decode an agent response body.

        Accepts a bare operation document or one wrapped in an async
        response envelope under "metadata".
        """
        if not isinstance(payload, dict):
            raise AgentDecodeError("operation payload must be a JSON object")

        if "id" not in payload and isinstance(payload.get("metadata"), dict):
            payload = payload["metadata"]

        if "id" not in payload or "status" not in payload:
            raise AgentDecodeError("operation payload missing id or status")

        metadata = payload.get("metadata")
        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise AgentDecodeError("operation metadata must be a JSON object")

        status_code = payload.get("status_code")
        if status_code is not None:
            try:
                status_code = int(status_code)
            except (TypeError, ValueError):
                raise AgentDecodeError("operation status_code must be an integer") from None

        return cls(
            id=str(payload["id"]),
            status=str(payload["status"]),
            status_code=status_code,
            metadata=metadata,
        )

    def is_failed(self) -> bool:
        if self.status.lower() in FAILED_OPERATION_STATUSES:
            return True
        return self.status_code is not None and self.status_code >= 400


class AgentClient:
    """Dispatches operation requests to host agents."""

    def __init__(self, agent_port: int = 8443, timeout: float = DEFAULT_TIMEOUT, scheme: str = "http"):
        """
        Initialize client.

        Args:
            agent_port: Port the agent listens on, on every host
            timeout: Hard ceiling for one request, in seconds
            scheme: URL scheme used to reach agents
        """
        self.agent_port = agent_port
        self.timeout = timeout
        self.scheme = scheme

    def base_url(self, host: Host) -> str:
        return f"{self.scheme}://{host.ip}:{self.agent_port}"

    def execute_operation_request(self, request: requests.Request) -> Operation:
        """
        Send a request to an agent and decode the operation it returns.

        Raises:
            AgentTransportError: connection failure or timeout
            AgentResponseError: non-2xx answer
            AgentDecodeError: body is not an operation document
        """
        with requests.Session() as session:
            prepared = session.prepare_request(request)
            try:
                response = session.send(prepared, timeout=self.timeout)
            except requests.exceptions.Timeout as e:
                raise AgentTransportError(
                    f"agent request {request.method} {request.url} timed out after {self.timeout}s"
                ) from e
            except requests.exceptions.RequestException as e:
                raise AgentTransportError(
                    f"agent request {request.method} {request.url} failed: {e}"
                ) from e

        if not 200 <= response.status_code < 300:
            raise AgentResponseError(
                f"agent returned [{response.status_code}]: {response.text}",
                response_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AgentDecodeError(f"agent returned invalid JSON: {e}") from e

        return Operation.from_payload(payload)

    # ============================================
    # REQUEST BUILDERS
    # ============================================

    def create_container(self, host: Host, container: Container) -> Operation:
        logger.info(f"[agent] create {container.name} on {host.name} ({host.ip})")
        request = requests.Request(
            "POST",
            f"{self.base_url(host)}/1.0/containers",
            json={
                "name": container.name,
                "source": {"type": "image", "alias": container.alias},
                "config": {"user.scheduler_id": str(container.container_id)},
            },
        )
        return self.execute_operation_request(request)

    def delete_container(self, host: Host, container: Container) -> Operation:
        logger.info(f"[agent] delete {container.name} on {host.name} ({host.ip})")
        request = requests.Request(
            "DELETE",
            f"{self.base_url(host)}/1.0/containers/{container.name}",
        )
        return self.execute_operation_request(request)
