"""Domain enumerations for the project management relay.

Enums represent fixed sets of domain values stored on tasks and
workspace memberships.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle status. DONE is terminal: no reminders after it."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings."""
        return [status.value for status in cls]


class WorkspaceRole(str, Enum):
    """Workspace membership role. Stored uppercase."""

    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

    @classmethod
    def normalize(cls, raw: object) -> str:
        """Uppercase a role name from the identity provider (e.g. 'member' -> 'MEMBER').

        Unknown roles are kept as their uppercase string.
        """
        return str(raw).upper()
