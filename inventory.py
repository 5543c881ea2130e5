"""Host lists, physical drive inventory and server summaries from iLO"""

import logging
from typing import List

import yaml

from errors import NotFoundError
from models import STATUS_SUCCESS, ResultRecord
from resources import ResourceNode, follow, get_manager, get_system, iter_members
from validators import parse_firmware_version

logger = logging.getLogger(__name__)

# iLO 5 reports Oem.Hpe, iLO 4 still Oem.Hp
_SMART_STORAGE_LINKS = ("Oem.Hpe.Links.SmartStorage", "Oem.Hp.Links.SmartStorage")


def load_hosts_file(path: str) -> List:
    """Read a YAML list of addresses or ``{address, hostname}`` mappings."""
    try:
        with open(path) as f:
            hosts = yaml.safe_load(f) or []
    except FileNotFoundError:
        logger.warning("Hosts file %s not found", path)
        return []
    if not isinstance(hosts, list):
        raise ValueError(f"{path}: expected a list of hosts")
    entries = []
    for item in hosts:
        if isinstance(item, dict):
            if not item.get("address"):
                raise ValueError(f"{path}: host entry without address: {item}")
            entries.append({"address": str(item["address"]), "hostname": item.get("hostname")})
        elif item:
            entries.append(str(item))
    return entries


def _smart_storage(client, system: ResourceNode) -> ResourceNode:
    for link in _SMART_STORAGE_LINKS:
        if link in system.links:
            return follow(client, system, link)
    raise NotFoundError(f"{system.odata_id} has no SmartStorage link")


def _drive_entry(controller: ResourceNode, drive: ResourceNode) -> dict:
    capacity_gb = drive.get("CapacityGB")
    if capacity_gb is None and drive.get("CapacityMiB") is not None:
        capacity_gb = round(drive.get("CapacityMiB") * 1.048576 / 1000)
    return {
        "controller": controller.get("Model") or controller.get("Location") or controller.odata_id,
        "location": drive.get("Location"),
        "model": drive.get("Model"),
        "serial_number": drive.get("SerialNumber"),
        "capacity_gb": capacity_gb,
        "media_type": drive.get("MediaType"),
        "interface_type": drive.get("InterfaceType"),
        "firmware": drive.get("FirmwareVersion.Current.VersionString"),
        "health": drive.get("Status.Health"),
        "state": drive.get("Status.State"),
    }


def get_physical_drives(client, hostname: str) -> ResultRecord:
    """List every physical drive behind every Smart Array controller."""
    system = get_system(client)
    storage = _smart_storage(client, system)
    controllers = follow(client, storage, "Links.ArrayControllers")
    drives = []
    for controller in iter_members(client, controllers):
        if "Links.PhysicalDrives" not in controller.links:
            logger.info("%s: controller %s exposes no physical drives", hostname, controller.odata_id)
            continue
        for drive in iter_members(client, follow(client, controller, "Links.PhysicalDrives")):
            drives.append(_drive_entry(controller, drive))
    logger.info("%s: %d physical drives", hostname, len(drives))
    return ResultRecord(hostname=hostname, status=STATUS_SUCCESS, value=drives)


def get_server_summary(client, hostname: str) -> ResultRecord:
    system = get_system(client)
    manager = get_manager(client)
    version = parse_firmware_version(manager.get("FirmwareVersion"))
    summary = {
        "hostname": system.get("HostName"),
        "model": system.get("Model"),
        "serial_number": system.get("SerialNumber"),
        "sku": system.get("SKU"),
        "power_state": system.get("PowerState"),
        "bios_version": system.get("BiosVersion"),
        "ilo_firmware": manager.get("FirmwareVersion"),
        "ilo_generation": version.generation if version else None,
    }
    return ResultRecord(hostname=hostname, status=STATUS_SUCCESS, value=summary)
