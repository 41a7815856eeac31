"""
Room error taxonomy
房间操作错误类型 - 每种错误对应一个HTTP状态码
"""

from fastapi import status


class RoomError(Exception):
    """Base error for any failed room action"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RoomValidationError(RoomError):
    """Malformed input or a guard that does not hold in the current state"""

    status_code = status.HTTP_400_BAD_REQUEST


class RoomForbiddenError(RoomError):
    """Not the host, or not a member of the room"""

    status_code = status.HTTP_403_FORBIDDEN


class RoomNotFoundError(RoomError):
    """Room expired/deleted, or target player absent"""

    status_code = status.HTTP_404_NOT_FOUND


class StoreError(RoomError):
    """Key-value store failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
