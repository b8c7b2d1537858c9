"""Database-level enumerations for survey sessions."""

import enum


class SessionStatus(str, enum.Enum):
    """Lifecycle states for a survey session.

    Transitions:
        created -> in_progress  (first question issued)
        in_progress -> completed (final question answered or none left)

    ``completed`` is terminal.
    """

    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
