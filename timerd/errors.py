"""Error codes reported by the time service and the exception that carries them."""

from __future__ import annotations

from enum import IntEnum

TIME_MODULE_SERVICE_ID = 0x04
_TIME_ERR_OFFSET = TIME_MODULE_SERVICE_ID << 16


class TimeError(IntEnum):
    """Result codes of the time service, numbered from the module's error offset."""

    E_TIME_OK = _TIME_ERR_OFFSET
    E_TIME_SA_DIED = _TIME_ERR_OFFSET + 1
    E_TIME_READ_PARCEL_ERROR = _TIME_ERR_OFFSET + 2
    E_TIME_WRITE_PARCEL_ERROR = _TIME_ERR_OFFSET + 3
    E_TIME_PUBLISH_FAIL = _TIME_ERR_OFFSET + 4
    E_TIME_TRANSACT_ERROR = _TIME_ERR_OFFSET + 5
    E_TIME_DEAL_FAILED = _TIME_ERR_OFFSET + 6
    E_TIME_PARAMETERS_INVALID = _TIME_ERR_OFFSET + 7
    E_TIME_SET_RTC_FAILED = _TIME_ERR_OFFSET + 8
    E_TIME_NOT_FOUND = _TIME_ERR_OFFSET + 9
    E_TIME_NO_PERMISSION = _TIME_ERR_OFFSET + 10


class TimeServiceError(Exception):
    """Raised when a time service operation fails with a known error code."""

    def __init__(self, code: TimeError | int, message: str = "") -> None:
        self.code = TimeError(code)
        self.message = message
        text = f"{self.code.name}: {message}" if message else self.code.name
        super().__init__(text)