"""Partial-update helpers for iLO settings resources"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from errors import parse_message_id
from resources import ResourceNode

logger = logging.getLogger("ilo_admin")


@dataclass(frozen=True)
class SettingsPatch:
    odata_id: str
    property_path: str
    value: Any

    def body(self) -> dict:
        """Nest ``value`` under the dotted path: ``a.b.c`` -> ``{"a": {"b": {"c": value}}}``."""
        parts = self.property_path.split(".")
        if not all(parts):
            raise ValueError(f"Invalid property path '{self.property_path}'")
        body: Any = self.value
        for part in reversed(parts):
            body = {part: body}
        return body


@dataclass(frozen=True)
class SettingOutcome:
    message_id: Optional[str]
    value: Any
    dry_run: bool = False


def apply_setting(client, node: ResourceNode, property_path: str, value: Any,
                  dry_run: bool = False) -> SettingOutcome:
    """
    PATCH one nested property on ``node`` and report the value in effect afterwards.

    The resource is always fetched again after the write; the returned value is
    what the iLO reports, not what was requested.
    """
    patch = SettingsPatch(node.odata_id, property_path, value)
    if dry_run:
        current = node.get(property_path)
        logger.info("Dry run: would set %s on %s to %r (currently %r)",
                    property_path, node.odata_id, value, current)
        return SettingOutcome(message_id=None, value=current, dry_run=True)

    logger.info("Setting %s on %s to %r", property_path, node.odata_id, value)
    result = client.patch(patch.odata_id, patch.body())
    message_id = parse_message_id(result)

    verified = client.get(node.odata_id).get(property_path)
    if verified != value:
        logger.warning("%s on %s is %r after requesting %r (%s)",
                       property_path, node.odata_id, verified, value, message_id)
    return SettingOutcome(message_id=message_id, value=verified)
