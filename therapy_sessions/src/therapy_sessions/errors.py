"""
Error types for the session collaborators.

The session core itself never raises: invalid navigation, logging with no
active session and stray assistance-level commits are all ignored. These
errors come from the storage and directory layers and from configuration.
"""

from typing import Optional


class TherapyAppError(Exception):
    """Base error carrying a message that is safe to show to a therapist."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message or self.user_message)
        self.cause = cause


class SessionPersistenceError(TherapyAppError):
    """Saving or loading a session record failed."""

    user_message = "Unable to save the session. Please try again."

    def __init__(self, session_id: str, cause: Optional[Exception] = None):
        super().__init__(f"Failed to persist session {session_id}: {cause}", cause)
        self.session_id = session_id


class GoalDirectoryError(TherapyAppError):
    """Clients or goals could not be loaded."""

    user_message = "Unable to load data. Please check your connection and try again."


class ConfigurationError(TherapyAppError):
    """An environment setting is missing or malformed."""

    user_message = "The app is not configured correctly."
