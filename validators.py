"""Input validation helpers and the firmware generation gate."""

import re
from typing import NamedTuple, Optional

from errors import RedfishError, UnsupportedVersionError

SUPPORTED_ILO_GENERATION = 5

# "<product> <generation> [v<major>[.<minor>]] ...", e.g. "iLO 5 v2.72"
_VERSION_RE = re.compile(
    r"^\s*(?P<product>\S+)\s+(?P<generation>[1-9]\d*)(?=\s|$)"
    r"(?:\s+v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?=\s|$))?"
)


class FirmwareVersion(NamedTuple):
    product: str
    generation: int
    major: Optional[int] = None
    minor: Optional[int] = None

    def __str__(self):
        text = f"{self.product} {self.generation}"
        if self.major is not None:
            text += f" v{self.major}"
            if self.minor is not None:
                text += f".{self.minor:02d}"
        return text


def parse_firmware_version(text) -> Optional[FirmwareVersion]:
    """Parse a manager FirmwareVersion string; None when it does not match."""
    if not isinstance(text, str):
        return None
    m = _VERSION_RE.match(text)
    if not m:
        return None
    major, minor = m.group("major"), m.group("minor")
    return FirmwareVersion(
        product=m.group("product"),
        generation=int(m.group("generation")),
        major=int(major) if major is not None else None,
        minor=int(minor) if minor is not None else None,
    )


def is_supported(node) -> bool:
    """Return True if the manager reports the supported iLO generation."""
    version = parse_firmware_version(node.get("FirmwareVersion"))
    return version is not None and version.generation == SUPPORTED_ILO_GENERATION


def require_supported(node) -> FirmwareVersion:
    if not is_supported(node):
        raise UnsupportedVersionError(node.get("FirmwareVersion"))
    return parse_firmware_version(node.get("FirmwareVersion"))


def validate_ilo_connection(address: str, user: str, pwd: str, verify: bool = False) -> bool:
    """Return True if able to open a Redfish session on the iLO."""
    from redfish_client import RedfishClient
    try:
        with RedfishClient(address, user, pwd, verify=verify) as client:
            client.get('/redfish/v1/')
        return True
    except RedfishError:
        return False
