"""
iLO Redfish error taxonomy

Exceptions raised by the client and the operations built on it, plus helpers
for reading the ``@Message.ExtendedInfo`` structure iLO returns on both
successful and rejected requests.
"""

from typing import Optional


class RedfishError(Exception):
    """Base exception for iLO Redfish operations"""

    def __init__(self, message: str, status_code: Optional[int] = None, message_id: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.message_id = message_id
        super().__init__(self.message)


class AuthError(RedfishError):
    """Bad credentials or unreachable target while opening a session"""


class TransportError(RedfishError):
    """Network or protocol failure while reading resources"""


class NotFoundError(RedfishError):
    """Resource or expected link is absent"""


class RequestError(RedfishError):
    """Mutation or action rejected by the target"""


class UnsupportedVersionError(RedfishError):
    """Firmware generation outside the supported one; routed, not a hard failure"""

    def __init__(self, firmware_version: Optional[str]):
        self.firmware_version = firmware_version
        super().__init__(f"Unsupported firmware version: {firmware_version!r}")


def extended_info(document: dict) -> list:
    """
    Return the ``@Message.ExtendedInfo`` entries of a response document.

    iLO nests them under ``error`` for PATCH/POST results and errors; some
    responses carry them at top level instead.
    """
    if not isinstance(document, dict):
        return []
    info = None
    error = document.get("error")
    if isinstance(error, dict):
        info = error.get("@Message.ExtendedInfo")
    if info is None:
        info = document.get("@Message.ExtendedInfo")
    if isinstance(info, dict):
        return [info]
    if isinstance(info, list):
        return [entry for entry in info if isinstance(entry, dict)]
    return []


def parse_message_id(document: dict) -> Optional[str]:
    """
    Extract the first MessageId, trimmed of surrounding whitespace.

    Args:
        document: Response body, e.g. ``{"error": {"@Message.ExtendedInfo": [{"MessageId": "Base.1.4.Success"}]}}``

    Returns:
        MessageId string, or None when the response carries none
    """
    for entry in extended_info(document):
        message_id = entry.get("MessageId")
        if isinstance(message_id, str) and message_id.strip():
            return message_id.strip()
    return None


def describe_error(document: dict) -> str:
    """Best human-readable text for an error response."""
    for entry in extended_info(document):
        if entry.get("Message"):
            return str(entry["Message"]).strip()
    error = document.get("error") if isinstance(document, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"]).strip()
    return parse_message_id(document) or "Unknown error"
