"""Error taxonomy shared by services and the API layer.

Every error carries a short, user-presentable ``message``. Technical detail
belongs in the log (``logger.exception``), never in ``message``.
"""


class ResolvixError(Exception):
    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ResolvixError):
    """A required field is missing or empty."""

    status_code = 400
    default_message = "Invalid request."


class AuthError(ResolvixError):
    """Session missing or invalid for an operation that requires one."""

    status_code = 401
    default_message = "Not authenticated"


class NotFoundError(ResolvixError):
    status_code = 404
    default_message = "Not found"


class InsufficientUsersError(ResolvixError):
    """A role pool is empty during ticket intake.

    Operational misconfiguration: an administrator must add members to the
    role before intake can succeed. Not retried automatically.
    """

    status_code = 409
    default_message = "Not enough users for assignment"

    def __init__(self, missing_roles: list[str]):
        self.missing_roles = list(missing_roles)
        super().__init__(
            "Not enough users for assignment: no " + ", ".join(self.missing_roles) + " profiles"
        )


class BackendError(ResolvixError):
    """The store or a remote collaborator reported a failure. Safe to retry."""

    status_code = 502
    default_message = "The service is temporarily unavailable. Please retry."
