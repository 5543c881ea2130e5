import logging

import requests
from requests.exceptions import RequestException

from errors import (
    AuthError,
    NotFoundError,
    RequestError,
    TransportError,
    describe_error,
    parse_message_id,
)
from resources import ResourceNode

logger = logging.getLogger("ilo_admin")

SESSIONS = "/redfish/v1/SessionService/Sessions/"


class RedfishClient:
    """Redfish client holding one token session against one iLO."""

    def __init__(self, base_url: str, username: str, password: str, verify: bool = False,
                 timeout: float = 30, http: requests.Session = None):
        if not base_url.startswith('http'):
            base_url = f"https://{base_url}"
        self.base_url = base_url.rstrip('/')
        self.username = username
        self._password = password
        self.timeout = timeout
        self.session = http if http is not None else requests.Session()
        self.session.verify = verify
        if not verify:
            requests.packages.urllib3.disable_warnings()  # self-signed certs common on iLO
        self.token = None
        self.location = None
        self.closed = False

    @classmethod
    def from_target(cls, target, verify: bool = False, timeout: float = 30, http=None):
        return cls(
            target.address,
            target.credential.username,
            target.credential.password,
            verify=verify,
            timeout=timeout,
            http=http,
        )

    def __enter__(self):
        self.login()
        return self

    def __exit__(self, *exc):
        self.logout()
        return False

    def __repr__(self):
        return f"RedfishClient({self.base_url!r}, user={self.username!r})"

    def _url(self, path: str) -> str:
        return path if path.startswith('http') else f"{self.base_url}{path}"

    def login(self):
        """Create a session and keep its X-Auth-Token for later requests."""
        url = self._url(SESSIONS)
        try:
            resp = self.session.post(
                url,
                json={"UserName": self.username, "Password": self._password},
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise AuthError(f"{self.base_url} unreachable: {exc}") from exc
        if resp.status_code in (401, 403):
            raise AuthError(
                f"Login to {self.base_url} rejected for {self.username}",
                status_code=resp.status_code,
                message_id=parse_message_id(_json_or_empty(resp)),
            )
        if resp.status_code >= 400:
            raise AuthError(f"Login to {self.base_url} failed: HTTP {resp.status_code}", status_code=resp.status_code)
        token = resp.headers.get('X-Auth-Token')
        if not token:
            raise AuthError(f"{self.base_url} returned no session token")
        self.token = token
        self.location = resp.headers.get('Location')
        self.session.headers['X-Auth-Token'] = token
        logger.info("Session opened on %s", self.base_url)
        return self

    def logout(self):
        """Delete the session if one exists and release the connection pool."""
        if self.closed:
            return
        self.closed = True
        try:
            if self.token and self.location:
                resp = self.session.delete(self._url(self.location), timeout=self.timeout)
                if resp.status_code not in (200, 202, 204):
                    logger.warning("Session delete on %s returned HTTP %s", self.base_url, resp.status_code)
        except RequestException as exc:
            logger.warning("Session delete on %s failed: %s", self.base_url, exc)
        finally:
            self.token = None
            self.session.headers.pop('X-Auth-Token', None)
            self.session.close()
            logger.info("Session closed on %s", self.base_url)

    def _request(self, method: str, path: str, body: dict = None):
        url = self._url(path)
        try:
            resp = self.session.request(method, url, json=body, timeout=self.timeout)
        except RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        logger.debug("%s %s -> HTTP %s", method, url, resp.status_code)
        if resp.status_code < 400:
            return _json_or_empty(resp, strict=True)

        document = _json_or_empty(resp)
        message_id = parse_message_id(document)
        detail = f"{method} {path}: HTTP {resp.status_code} {describe_error(document)}"
        if resp.status_code in (401, 403):
            raise AuthError(detail, status_code=resp.status_code, message_id=message_id)
        if resp.status_code == 404:
            raise NotFoundError(detail, status_code=resp.status_code, message_id=message_id)
        if method == 'GET':
            raise TransportError(detail, status_code=resp.status_code, message_id=message_id)
        raise RequestError(detail, status_code=resp.status_code, message_id=message_id)

    def get(self, path: str) -> ResourceNode:
        return ResourceNode.from_document(self._request('GET', path), path)

    def patch(self, path: str, body: dict) -> dict:
        return self._request('PATCH', path, body)

    def post(self, path: str, body: dict = None) -> dict:
        return self._request('POST', path, body if body is not None else {})


def _json_or_empty(resp, strict: bool = False) -> dict:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError as exc:
        if strict:
            raise TransportError(f"Invalid JSON from {resp.url}: {exc}") from exc
        return {}
