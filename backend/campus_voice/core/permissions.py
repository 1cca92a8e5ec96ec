"""Which roles may run which operation.

Every role check goes through ``OPERATION_ROLES``. Routers declare the
operation they perform via ``api.deps.require_operation``; services that
narrow results by role ask ``is_allowed`` directly.
"""
import enum

from campus_voice.models.user import UserRole


class Operation(str, enum.Enum):
    SUBMIT_FEEDBACK = "submit_feedback"
    LIST_OWN_FEEDBACK = "list_own_feedback"
    VIEW_FEEDBACK = "view_feedback"
    VIEW_ANY_FEEDBACK = "view_any_feedback"
    VIEW_STATS = "view_stats"
    READ_NOTIFICATIONS = "read_notifications"
    LIST_ALL_FEEDBACK = "list_all_feedback"
    TRANSITION_FEEDBACK = "transition_feedback"


_ANY_USER = frozenset({UserRole.STUDENT, UserRole.ADMIN})
_ADMIN_ONLY = frozenset({UserRole.ADMIN})

OPERATION_ROLES: dict[Operation, frozenset[UserRole]] = {
    Operation.SUBMIT_FEEDBACK: _ANY_USER,
    Operation.LIST_OWN_FEEDBACK: _ANY_USER,
    Operation.VIEW_FEEDBACK: _ANY_USER,
    Operation.VIEW_STATS: _ANY_USER,
    Operation.READ_NOTIFICATIONS: _ANY_USER,
    Operation.LIST_ALL_FEEDBACK: _ADMIN_ONLY,
    Operation.VIEW_ANY_FEEDBACK: _ADMIN_ONLY,
    Operation.TRANSITION_FEEDBACK: _ADMIN_ONLY,
}


def is_allowed(role: UserRole, operation: Operation) -> bool:
    # unknown operations are denied
    return role in OPERATION_ROLES.get(operation, frozenset())
