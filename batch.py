"""Sequential per-host execution with one Redfish session per host"""

import logging
from typing import Callable, Iterable, List, Optional

import config
from errors import RedfishError, UnsupportedVersionError
from models import STATUS_NOT_ATTEMPTED, Credential, ManagementTarget, ResultRecord
from redfish_client import RedfishClient

logger = logging.getLogger("ilo_admin")

Action = Callable[[RedfishClient, str], ResultRecord]
ClientFactory = Callable[[ManagementTarget], RedfishClient]


def build_targets(addresses: Iterable, credential: Credential) -> List[ManagementTarget]:
    """Pair every address (or ``{"address", "hostname"}`` mapping) with the one credential."""
    targets = []
    for item in addresses:
        if isinstance(item, ManagementTarget):
            targets.append(item)
        elif isinstance(item, dict):
            targets.append(ManagementTarget(item["address"], credential, item.get("hostname")))
        else:
            targets.append(ManagementTarget(str(item), credential))
    return targets


def run_target(target: ManagementTarget, action: Action, client_factory: ClientFactory) -> ResultRecord:
    """Run ``action`` against one host; always closes the session and returns a record."""
    hostname = target.hostname
    client = None
    logger.debug("%s: init", hostname)
    try:
        client = client_factory(target)
        client.login()
        logger.debug("%s: connected", hostname)
        record = action(client, hostname)
        logger.debug("%s: %s", hostname, record.status)
    except UnsupportedVersionError as exc:
        logger.info("%s: %s, not attempted", hostname, exc)
        record = ResultRecord(hostname=hostname, status=STATUS_NOT_ATTEMPTED, error=str(exc))
    except RedfishError as exc:
        logger.warning("%s: %s failed: %s", hostname, exc.__class__.__name__, exc)
        record = ResultRecord.failed(hostname, exc)
    except Exception as exc:
        logger.exception("%s: unexpected failure", hostname)
        record = ResultRecord.failed(hostname, exc)
    finally:
        if client is not None:
            client.logout()
            logger.debug("%s: closed", hostname)
    return record


def run_batch(
    targets: Iterable[ManagementTarget],
    action: Action,
    client_factory: Optional[ClientFactory] = None,
    verify: bool = None,
    timeout: float = None,
) -> List[ResultRecord]:
    """Apply ``action`` to every target in order; one record per target."""
    if client_factory is None:
        verify = config.VERIFY_TLS if verify is None else verify
        timeout = config.REQUEST_TIMEOUT if timeout is None else timeout

        def client_factory(target):
            return RedfishClient.from_target(target, verify=verify, timeout=timeout)

    results = []
    for target in targets:
        results.append(run_target(target, action, client_factory))
    failed = sum(1 for r in results if not r.ok)
    logger.info("Batch finished: %d hosts, %d failed", len(results), failed)
    return results
