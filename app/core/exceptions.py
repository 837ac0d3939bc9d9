"""
Error taxonomy shared by all procedures.

Each error is an HTTPException so FastAPI renders it as ``{"detail": ...}``
without extra handlers.
"""

from fastapi import HTTPException, status


class Unauthorized(HTTPException):
    """Caller has no profile, or the profile's role is insufficient."""

    def __init__(self, detail: str = "Unauthorized: Admin access required", anonymous: bool = False):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED if anonymous else status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class StoreFailure(HTTPException):
    """Relational or blob store call failed for reasons outside the caller's control."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
