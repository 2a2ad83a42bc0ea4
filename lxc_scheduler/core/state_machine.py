# lxc_scheduler/core/state_machine.py

from lxc_scheduler.core.errors import InvalidTransition
from lxc_scheduler.core.models import Container, ContainerStatus


# Statuses an external reporter may set through a status update.
REPORTABLE_STATUSES = frozenset({
    ContainerStatus.RUNNING,
    ContainerStatus.STOPPED,
    ContainerStatus.FAILED,
})


ALLOWED_TRANSITIONS = {
    ContainerStatus.CREATING: {
        ContainerStatus.RUNNING,
        ContainerStatus.FAILED,
    },
    ContainerStatus.RUNNING: {
        ContainerStatus.STOPPED,
        ContainerStatus.FAILED,
    },
    ContainerStatus.STOPPED: {
        ContainerStatus.RUNNING,
        ContainerStatus.FAILED,
    },
    # manual recovery
    ContainerStatus.FAILED: {
        ContainerStatus.RUNNING,
    },
    # row removal only
    ContainerStatus.DELETING: set(),
}


class ContainerStateMachine:
    @staticmethod
    def can_transition(current: ContainerStatus, new_status: ContainerStatus) -> bool:
        if new_status not in REPORTABLE_STATUSES:
            return False
        if current == new_status:
            return True
        return new_status in ALLOWED_TRANSITIONS.get(current, set())

    @staticmethod
    def transition(container: Container, new_status: ContainerStatus) -> Container:
        """
        Apply a reported status to a container.

        Re-reporting the current status is a no-op.
        """
        current = container.status

        if not ContainerStateMachine.can_transition(current, new_status):
            raise InvalidTransition(
                f"Cannot transition container {container.container_id} "
                f"from {current.value} to {new_status.value}"
            )

        container.status = new_status
        return container

    @staticmethod
    def begin_delete(container: Container) -> Container:
        """Any status may move to DELETING."""
        container.status = ContainerStatus.DELETING
        return container
