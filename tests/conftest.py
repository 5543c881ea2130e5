import copy
import json
import os
import sys
from urllib.parse import urlsplit

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from redfish_client import RedfishClient

SESSIONS = "/redfish/v1/SessionService/Sessions"
MANAGER = "/redfish/v1/Managers/1"
NETWORK_PROTOCOL = "/redfish/v1/Managers/1/NetworkProtocol"
TEST_ALERT = NETWORK_PROTOCOL + "/Actions/Oem/Hpe/HpeiLOManagerNetworkService.SendTestAlertMail"


def _path(url: str) -> str:
    return urlsplit(url).path.rstrip("/")


def _merge(target: dict, changes: dict) -> None:
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


def _info(message_id: str) -> dict:
    return {
        "error": {
            "code": "iLO.0.10.ExtendedInfo",
            "message": "See @Message.ExtendedInfo for more information.",
            "@Message.ExtendedInfo": [{"MessageId": message_id}],
        }
    }


class FakeResponse:
    def __init__(self, status_code=200, body=None, headers=None, url="", raw=None):
        self.status_code = status_code
        self.headers = headers or {}
        self.url = url
        if raw is not None:
            self.content = raw
        else:
            self.content = b"" if body is None else json.dumps(body).encode()

    def json(self):
        return json.loads(self.content)


class FakeIlo:
    """In-memory stand-in for the requests.Session of one iLO."""

    def __init__(self, generation=5, firmware=None, password="secret", smtp_secure=False, managers=1):
        self.verify = True
        self.headers = {}
        self.password = password
        self.calls = []
        self.closed = 0
        self.failures = {}
        self.raw = {}
        self.read_only = False
        self.patch_message_id = "  Base.1.4.Success \n"
        self.token = None
        self.sessions_created = 0
        self.docs = {}

        self.add({
            "@odata.id": "/redfish/v1/",
            "RedfishVersion": "1.6.0",
            "Managers": {"@odata.id": "/redfish/v1/Managers/"},
            "Systems": {"@odata.id": "/redfish/v1/Systems/"},
        })
        self.add({
            "@odata.id": "/redfish/v1/Managers/",
            "Members": [{"@odata.id": f"/redfish/v1/Managers/{i}/"} for i in range(1, managers + 1)],
            "Members@odata.count": managers,
        })
        for i in range(1, managers + 1):
            self.add({
                "@odata.id": f"/redfish/v1/Managers/{i}/",
                "FirmwareVersion": firmware if firmware is not None else f"iLO {generation} v2.72",
                "NetworkProtocol": {"@odata.id": f"/redfish/v1/Managers/{i}/NetworkProtocol/"},
            })
        self.add({
            "@odata.id": "/redfish/v1/Managers/1/NetworkProtocol/",
            "HostName": "ilo-test",
            "Oem": {
                "Hpe": {
                    "AlertMailEnabled": True,
                    "AlertMailSMTPServer": "smtp.example.com",
                    "AlertMailSMTPSecureEnabled": smtp_secure,
                    "Actions": {
                        "#HpeiLOManagerNetworkService.SendTestAlertMail": {
                            "target": TEST_ALERT + "/",
                        }
                    },
                }
            },
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/",
            "Members": [{"@odata.id": "/redfish/v1/Systems/1/"}],
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/",
            "HostName": "esx01",
            "Model": "ProLiant BL460c Gen10",
            "SerialNumber": "CZ0000TEST",
            "SKU": "863442-B21",
            "PowerState": "On",
            "BiosVersion": "I41 v2.80 (01/25/2023)",
            "Oem": {"Hpe": {"Links": {"SmartStorage": {"@odata.id": "/redfish/v1/Systems/1/SmartStorage/"}}}},
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/SmartStorage/",
            "Links": {"ArrayControllers": {"@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/"}},
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/",
            "Members": [{"@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/"}],
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/",
            "Model": "HPE Smart Array P204i-b SR Gen10",
            "Location": "Slot 0",
            "Links": {
                "PhysicalDrives": {"@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/DiskDrives/"},
            },
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/DiskDrives/",
            "Members": [
                {"@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/DiskDrives/0/"},
                {"@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/DiskDrives/1/"},
            ],
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/DiskDrives/0/",
            "Location": "1I:1:1",
            "Model": "MM001920JYNYR",
            "SerialNumber": "S1",
            "CapacityGB": 1920,
            "MediaType": "SSD",
            "InterfaceType": "SATA",
            "FirmwareVersion": {"Current": {"VersionString": "HPG2"}},
            "Status": {"Health": "OK", "State": "Enabled"},
        })
        self.add({
            "@odata.id": "/redfish/v1/Systems/1/SmartStorage/ArrayControllers/0/DiskDrives/1/",
            "Location": "1I:1:2",
            "Model": "EG001200JWJNQ",
            "SerialNumber": "S2",
            "CapacityMiB": 1144641,
            "MediaType": "HDD",
            "InterfaceType": "SAS",
            "FirmwareVersion": {"Current": {"VersionString": "HPD4"}},
            "Status": {"Health": "Warning", "State": "Enabled"},
        })

    # --- setup helpers ---

    def add(self, doc: dict) -> None:
        self.docs[_path(doc["@odata.id"])] = doc

    def doc(self, path: str) -> dict:
        return self.docs[_path(path)]

    def fail(self, method: str, path: str, error, message_id: str = "Base.1.4.InternalError") -> None:
        """Make ``method path`` raise ``error`` or answer with HTTP status ``error``."""
        self.failures[(method, _path(path))] = (error, message_id)

    def calls_to(self, method: str, path: str = None) -> list:
        return [c for c in self.calls if c[0] == method and (path is None or c[1] == _path(path))]

    # --- requests.Session surface ---

    def request(self, method, url, json=None, timeout=None, **kwargs):
        path = _path(url)
        self.calls.append((method, path, json))
        if (method, path) in self.failures:
            error, message_id = self.failures[(method, path)]
            if isinstance(error, Exception):
                raise error
            return FakeResponse(error, _info(message_id), url=url)
        if (method, path) in self.raw:
            return FakeResponse(200, raw=self.raw[(method, path)], url=url)

        if method == "POST" and path == SESSIONS:
            return self._login(url, json or {})
        if self.token is None or self.headers.get("X-Auth-Token") != self.token:
            return FakeResponse(401, _info("Base.1.4.NoValidSession"), url=url)
        if method == "DELETE" and path.startswith(SESSIONS + "/"):
            self.token = None
            return FakeResponse(200, _info("Base.1.4.Success"), url=url)
        if method == "POST":
            return FakeResponse(200, _info("Base.1.4.Success"), url=url)
        if path not in self.docs:
            return FakeResponse(404, _info("Base.1.4.ResourceMissingAtURI"), url=url)
        if method == "GET":
            return FakeResponse(200, copy.deepcopy(self.docs[path]), url=url)
        if method == "PATCH":
            if not self.read_only:
                _merge(self.docs[path], copy.deepcopy(json or {}))
            return FakeResponse(200, _info(self.patch_message_id), url=url)
        return FakeResponse(405, _info("Base.1.4.OperationNotAllowed"), url=url)

    def _login(self, url, body):
        if body.get("Password") != self.password:
            return FakeResponse(401, _info("Base.1.4.NoValidSession"), url=url)
        self.sessions_created += 1
        self.token = f"token-{self.sessions_created}"
        netloc = urlsplit(url).netloc
        return FakeResponse(
            201,
            {},
            headers={
                "X-Auth-Token": self.token,
                "Location": f"https://{netloc}{SESSIONS}/admin{self.sessions_created:04d}/",
            },
            url=url,
        )

    def post(self, url, json=None, **kwargs):
        return self.request("POST", url, json=json, **kwargs)

    def delete(self, url, **kwargs):
        return self.request("DELETE", url, **kwargs)

    def close(self):
        self.closed += 1


@pytest.fixture
def ilo():
    return FakeIlo()


@pytest.fixture
def client(ilo):
    return RedfishClient("ilo1.example.com", "admin", "secret", http=ilo)


@pytest.fixture
def session(client):
    client.login()
    yield client
    client.logout()
