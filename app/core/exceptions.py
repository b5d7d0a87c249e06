from typing import Any


class ApiError(Exception):
    """Business error surfaced to the client as ``{"message": ..., **extra}``.

    ``extra`` carries structured details (counts per status, the colliding
    reservation, ...) so the caller can decide what to do next, e.g. retry a
    close with ``force``.
    """

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"message": self.message}
        body.update(self.extra)
        return body


class BadRequest(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class InvalidTransition(BadRequest):
    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"{entity} cannot move from '{current}' to '{target}'",
            current_status=current,
            requested_status=target,
        )
