"""Domain errors raised by the services and rendered by the routers."""

from __future__ import annotations

from fastapi import status


class SmartMessError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


class Unauthorized(SmartMessError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class Forbidden(SmartMessError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotAssociated(SmartMessError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Mess owner not associated with any mess"


class OverlappingLeave(SmartMessError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Leave dates overlap with existing scheduled leave"


class LeaveNotFound(SmartMessError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Leave not found"


class InvalidRequest(SmartMessError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class UserNotFound(SmartMessError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"
