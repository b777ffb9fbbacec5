"""Exception hierarchy for the smart-plug protocol client.

Every failure raised by this package derives from :class:`HS100Error` and
identifies the phase that failed: transport (connect, write, read),
protocol (frame or document), or a rejection reported by the device.
"""

from __future__ import annotations


class HS100Error(Exception):
    """Base class for all errors raised by this package."""


class TransportError(HS100Error, ConnectionError):
    """Connecting, writing to, or reading from the device failed."""

    def __init__(self, message: str, phase: str = "connect") -> None:
        super().__init__(message)
        self.phase = phase


class ProtocolError(HS100Error):
    """The device reply could not be decoded."""


class FrameError(ProtocolError):
    """A length-prefixed frame was truncated or declared an oversized length."""


class AbsentError(ProtocolError):
    """The response did not contain the requested module/action leaf."""

    def __init__(self, module: str, action: str) -> None:
        super().__init__(f"Response has no '{module}.{action}' entry")
        self.module = module
        self.action = action


class DeviceError(HS100Error):
    """The device answered with a nonzero ``err_code``."""

    def __init__(
        self,
        code: int,
        message: str | None = None,
        module: str = "",
        action: str = "",
    ) -> None:
        where = f"{module}.{action} " if module else ""
        text = f"{where}failed with err_code={code}"
        if message:
            text += f": {message}"
        super().__init__(text)
        self.code = code
        self.message = message
        self.module = module
        self.action = action
