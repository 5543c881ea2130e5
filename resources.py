"""Redfish resource snapshots and link traversal"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Tuple

from errors import NotFoundError

logger = logging.getLogger("ilo_admin")

MANAGERS = "/redfish/v1/Managers/"
SYSTEMS = "/redfish/v1/Systems/"

_MISSING = object()


def lookup(mapping: Mapping, path: str, default: Any = None) -> Any:
    """Read a nested value by dotted path, e.g. ``Oem.Hpe.AlertMailSMTPSecureEnabled``."""
    current = mapping
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


def _collect_links(document: Mapping, prefix: str = "") -> dict:
    links = {}
    for key, value in document.items():
        if key.startswith("@") or not isinstance(value, Mapping):
            continue
        name = f"{prefix}{key}"
        if "@odata.id" in value:
            links[name] = value["@odata.id"]
        else:
            links.update(_collect_links(value, prefix=f"{name}."))
    return links


@dataclass(frozen=True)
class ResourceNode:
    """Read-only snapshot of one fetched Redfish document."""

    odata_id: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    links: Mapping[str, str] = field(default_factory=dict)
    members: Tuple[str, ...] = ()

    @classmethod
    def from_document(cls, document: dict, path: str = "") -> "ResourceNode":
        document = document or {}
        members = tuple(
            m["@odata.id"]
            for m in document.get("Members", [])
            if isinstance(m, Mapping) and "@odata.id" in m
        )
        return cls(
            odata_id=document.get("@odata.id") or path,
            attributes=MappingProxyType(dict(document)),
            links=MappingProxyType(_collect_links(document)),
            members=members,
        )

    def get(self, path: str, default: Any = None) -> Any:
        return lookup(self.attributes, path, default)

    def link(self, name: str) -> str:
        target = self.links.get(name, _MISSING)
        if target is _MISSING:
            raise NotFoundError(f"{self.odata_id} has no link '{name}'")
        return target


def fetch(client, odata_id: str) -> ResourceNode:
    return client.get(odata_id)


def follow(client, node: ResourceNode, link_name: str) -> ResourceNode:
    """Fetch the resource behind one of ``node``'s links."""
    return client.get(node.link(link_name))


def first_member(client, collection: ResourceNode) -> ResourceNode:
    """
    Fetch the first member of a collection.

    Only the first member is inspected; additional members are reported
    in the log and otherwise ignored.
    """
    if not collection.members:
        raise NotFoundError(f"{collection.odata_id} has no members")
    if len(collection.members) > 1:
        logger.warning(
            "%s has %d members, only %s is inspected",
            collection.odata_id,
            len(collection.members),
            collection.members[0],
        )
    return client.get(collection.members[0])


def iter_members(client, collection: ResourceNode) -> Iterator[ResourceNode]:
    for member in collection.members:
        yield client.get(member)


def get_manager(client) -> ResourceNode:
    """Managers collection -> first manager (the iLO itself)."""
    return first_member(client, client.get(MANAGERS))


def get_network_protocol(client, manager: ResourceNode) -> ResourceNode:
    return follow(client, manager, "NetworkProtocol")


def get_system(client) -> ResourceNode:
    return first_member(client, client.get(SYSTEMS))
