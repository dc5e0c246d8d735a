# ptime/errors.py
from typing import Optional


class PTimeError(Exception):
    """Base for every rejection the API surfaces to a caller."""

    status_code = 500
    code = "error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.__class__.__name__
        super().__init__(self.detail)


class Unauthenticated(PTimeError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(PTimeError):
    status_code = 403
    code = "forbidden"


class InvalidEmployer(Forbidden):
    code = "invalid_employer"


class NotFound(PTimeError):
    status_code = 404
    code = "not_found"


class AlreadyRegistered(PTimeError):
    status_code = 409
    code = "already_registered"


class NoAccount(PTimeError):
    status_code = 404
    code = "no_account"


class RoleMismatch(PTimeError):
    status_code = 403

    def __init__(self, declared: str, actual: str):
        self.declared = declared
        self.actual = actual
        super().__init__(f"Account is registered as {actual}, not {declared}")

    @property
    def code(self) -> str:  # type: ignore[override]
        return f"role_mismatch_{self.declared}_is_{self.actual}"


class InvalidIntent(PTimeError):
    status_code = 400
    code = "invalid_intent"


class InvalidTransition(PTimeError):
    status_code = 409
    code = "invalid_status_transition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move a job from {current} to {requested}")


class UpstreamFailure(PTimeError):
    status_code = 502
    code = "upstream_failure"


class Conflict(UpstreamFailure):
    """A write hit a unique constraint."""

    status_code = 409
    code = "conflict"
