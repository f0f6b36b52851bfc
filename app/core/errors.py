from enum import Enum


class AuthError(str, Enum):
    """
    Expected auth failures. These travel inside result objects
    (LoginResult, SessionResolution, Decision, ...) and are never raised;
    the controllers decide which HTTP status each one becomes.
    """
    INVALID_CREDENTIALS = "invalid_credentials"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_EXPIRED = "session_expired"
    SESSION_ORPHANED = "session_orphaned"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    LOCKED_OUT = "locked_out"
    WRONG_SELECTION = "wrong_selection"
    CHALLENGE_INVALID = "challenge_invalid"


class InfrastructureFailure(Exception):
    """The credential/session store could not be reached or failed mid-query."""

    def __init__(self, operation: str):
        super().__init__(f"store failure during {operation}")
        self.operation = operation
