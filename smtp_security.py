"""AlertMail SMTP secure-connection setting via Redfish"""

import enum
import logging

from errors import RedfishError
from models import STATUS_DRYRUN, STATUS_SUCCESS, ResultRecord
from resources import ResourceNode, get_manager, get_network_protocol
from settings import apply_setting
from validators import require_supported

logger = logging.getLogger("ilo_admin")

SMTP_SECURE_PROPERTY = "Oem.Hpe.AlertMailSMTPSecureEnabled"
TEST_ALERT_ACTION = "#HpeiLOManagerNetworkService.SendTestAlertMail"


class SmtpSecureState(enum.Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"

    @property
    def enabled(self) -> bool:
        return self is SmtpSecureState.ENABLED

    @classmethod
    def from_value(cls, value) -> "SmtpSecureState":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.ENABLED if value else cls.DISABLED
        for state in cls:
            if str(value).lower() == state.value.lower():
                return state
        raise ValueError(f"Invalid SMTP secure state '{value}'")


def _network_protocol(client, hostname: str) -> ResourceNode:
    manager = get_manager(client)
    version = require_supported(manager)
    logger.debug("%s: version checked (%s)", hostname, version)
    return get_network_protocol(client, manager)


def send_test_alert_mail(client, node: ResourceNode) -> None:
    """Trigger the iLO test alert mail. The action result is not used."""
    target = (node.get("Oem.Hpe.Actions") or {}).get(TEST_ALERT_ACTION, {}).get("target")
    if not target:
        target = f"{node.odata_id.rstrip('/')}/Actions/Oem/Hpe/HpeiLOManagerNetworkService.SendTestAlertMail/"
    try:
        client.post(target, {})
        logger.info("Test alert mail requested on %s", client.base_url)
    except RedfishError as exc:
        logger.warning("Test alert mail on %s failed: %s", client.base_url, exc)


def get_smtp_secure(client, hostname: str, send_test_alert: bool = False) -> ResultRecord:
    """Read the AlertMail SMTP secure-connection flag."""
    protocol = _network_protocol(client, hostname)
    value = protocol.get(SMTP_SECURE_PROPERTY)
    logger.debug("%s: read done", hostname)
    if send_test_alert:
        send_test_alert_mail(client, protocol)
    return ResultRecord(hostname=hostname, status=STATUS_SUCCESS, value=value)


def set_smtp_secure(client, hostname: str, state, dry_run: bool = False,
                    send_test_alert: bool = False) -> ResultRecord:
    """Enable or disable the AlertMail SMTP secure connection and verify it."""
    state = SmtpSecureState.from_value(state)
    protocol = _network_protocol(client, hostname)
    outcome = apply_setting(client, protocol, SMTP_SECURE_PROPERTY, state.enabled, dry_run=dry_run)
    logger.debug("%s: %s done", hostname, "dry run" if outcome.dry_run else "write")
    if send_test_alert and not dry_run:
        send_test_alert_mail(client, protocol)
    return ResultRecord(
        hostname=hostname,
        status=STATUS_DRYRUN if outcome.dry_run else STATUS_SUCCESS,
        value=outcome.value,
        message_id=outcome.message_id,
    )
