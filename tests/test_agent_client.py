"""Test host agent client."""

import pytest
from unittest.mock import MagicMock, patch
from uuid import uuid4

import requests

from lxc_scheduler.agent.client import AgentClient, Operation
from lxc_scheduler.core.errors import (
    AgentDecodeError,
    AgentError,
    AgentResponseError,
    AgentTransportError,
)
from lxc_scheduler.core.models import Container, Host


def agent_response(payload=None, status_code=200, invalid_json=False):
    response = MagicMock()
    response.status_code = status_code
    response.text = "agent says no"
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def client():
    return AgentClient(agent_port=8443)


@pytest.fixture
def request_():
    return requests.Request("GET", "http://10.0.0.1:8443/1.0/operations/op-1")


class TestOperation:

    def test_from_bare_payload(self):
        op = Operation.from_payload({"id": "op-1", "status": "Running", "status_code": 103})

        assert op.id == "op-1"
        assert op.status_code == 103
        assert op.metadata == {}
        assert not op.is_failed()

    def test_from_async_envelope(self):
        op = Operation.from_payload({
            "type": "async",
            "status": "Operation created",
            "status_code": 100,
            "metadata": {"id": "op-2", "status": "Pending", "metadata": {"step": 1}},
        })

        assert op.id == "op-2"
        assert op.status == "Pending"
        assert op.metadata == {"step": 1}

    @pytest.mark.parametrize("payload", [[], {"status": "Running"}, {"id": "x", "status": "Running", "metadata": []}])
    def test_rejects_bad_payload(self, payload):
        with pytest.raises(AgentDecodeError):
            Operation.from_payload(payload)

    @pytest.mark.parametrize("status,status_code,failed", [
        ("Success", 200, False),
        ("Failure", 400, True),
        ("Cancelled", None, True),
        ("Running", 500, True),
    ])
    def test_is_failed(self, status, status_code, failed):
        assert Operation(id="op", status=status, status_code=status_code).is_failed() is failed


class TestExecuteOperationRequest:

    def test_decodes_operation(self, client, request_):
        with patch.object(requests.Session, "send") as send:
            send.return_value = agent_response({"id": "op-1", "status": "Success"})

            op = client.execute_operation_request(request_)

        assert op == Operation(id="op-1", status="Success")
        assert send.call_args.kwargs["timeout"] == 10.0

    def test_timeout_is_transport_error(self, client, request_):
        with patch.object(requests.Session, "send", side_effect=requests.exceptions.Timeout("slow")):
            with pytest.raises(AgentTransportError):
                client.execute_operation_request(request_)

    def test_connection_error_is_transport_error(self, client, request_):
        with patch.object(requests.Session, "send", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(AgentTransportError):
                client.execute_operation_request(request_)

    def test_non_2xx(self, client, request_):
        with patch.object(requests.Session, "send", return_value=agent_response(status_code=404)):
            with pytest.raises(AgentResponseError) as exc_info:
                client.execute_operation_request(request_)

        assert exc_info.value.response_status == 404
        assert exc_info.value.status_code == 502

    def test_malformed_json(self, client, request_):
        with patch.object(requests.Session, "send", return_value=agent_response(invalid_json=True)):
            with pytest.raises(AgentDecodeError):
                client.execute_operation_request(request_)

    def test_all_failures_are_agent_errors(self):
        for error in (AgentTransportError, AgentResponseError, AgentDecodeError):
            assert issubclass(error, AgentError)


class TestRequestBuilders:

    @pytest.fixture
    def host(self):
        return Host(host_id=uuid4(), name="h1", ip="10.0.0.1")

    @pytest.fixture
    def container(self, host):
        return Container(container_id=uuid4(), name="c1", alias="ubuntu", host_id=host.host_id)

    def test_create_container(self, client, host, container):
        with patch.object(AgentClient, "execute_operation_request") as execute:
            execute.return_value = Operation(id="op-1", status="Running")

            client.create_container(host, container)

        sent = execute.call_args.args[0]
        assert sent.method == "POST"
        assert sent.url == "http://10.0.0.1:8443/1.0/containers"
        assert sent.json["name"] == "c1"
        assert sent.json["source"] == {"type": "image", "alias": "ubuntu"}

    def test_delete_container(self, client, host, container):
        with patch.object(AgentClient, "execute_operation_request") as execute:
            execute.return_value = Operation(id="op-2", status="Running")

            client.delete_container(host, container)

        sent = execute.call_args.args[0]
        assert sent.method == "DELETE"
        assert sent.url == "http://10.0.0.1:8443/1.0/containers/c1"
