import logging
import re
from typing import Any, Dict, List, Optional, Union

import requests

from .conversion import parse_response
from .exceptions import RemoteApiError

logger = logging.getLogger("directadmin.connection")

Response = Union[Dict[str, Any], List[str]]

_TAG_RE = re.compile(r"<[^>]+>")


class Connection:
    """
    Authenticated HTTP access to the DirectAdmin ``CMD_API_*`` endpoints.

    The login may be of the form ``admin|user``, in which case DirectAdmin
    executes every call as ``user`` on the strength of ``admin``'s password.
    """

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        verify_ssl: bool = True,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = url.rstrip("/")
        self.login = username
        self._password = password
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def username(self) -> str:
        """The account every call on this connection acts as."""
        return self.login.split("|")[-1]

    def login_as(self, username: str) -> "Connection":
        """Return a connection acting as ``username`` with the same credentials."""
        owner = self.login.split("|")[0]
        return Connection(
            self.base_url,
            f"{owner}|{username}",
            self._password,
            verify_ssl=self.verify_ssl,
            timeout=self.timeout,
            session=self.session,
        )

    def invoke_get(self, command: str, params: Optional[Dict[str, Any]] = None) -> Response:
        return self.invoke_api("GET", command, params)

    def invoke_post(self, command: str, params: Optional[Dict[str, Any]] = None) -> Response:
        return self.invoke_api("POST", command, params)

    def invoke_api(
        self, method: str, command: str, params: Optional[Dict[str, Any]] = None
    ) -> Response:
        body = self._raw_request(method, command, params or {})
        result = parse_response(body)

        if isinstance(result, dict) and result.get("error") not in (None, "", "0"):
            details = result.get("details", "")
            text = result.get("text", "")
            logger.warning("%s to %s failed: %s", method, command, text or details)
            raise RemoteApiError(
                f"{method} to {command} failed: {details} ({text})",
                command=command,
                details=details or text,
            )
        return result

    def _raw_request(self, method: str, command: str, params: Dict[str, Any]) -> str:
        url = f"{self.base_url}/CMD_API_{command}"
        payload = {"params": params} if method == "GET" else {"data": params}
        logger.debug("%s %s as %s", method, command, self.username)

        try:
            response = self.session.request(
                method=method,
                url=url,
                auth=(self.login, self._password),
                verify=self.verify_ssl,
                timeout=self.timeout,
                **payload,
            )
            response.raise_for_status()
        except requests.exceptions.SSLError as e:
            raise RemoteApiError(
                f"SSL Error: {str(e)}. Check verify_ssl setting.", command=command
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise RemoteApiError(
                f"Cannot reach host: {self.base_url}", command=command
            ) from e
        except requests.exceptions.Timeout as e:
            raise RemoteApiError("Request timed out", command=command) from e
        except requests.exceptions.RequestException as e:
            status = e.response.status_code if e.response is not None else None
            raise RemoteApiError(
                f"API failed: {str(e)}", command=command, status_code=status
            ) from e

        content_type = response.headers.get("Content-Type", "")
        if content_type.startswith("text/html"):
            snippet = _TAG_RE.sub("", response.text).strip()
            raise RemoteApiError(
                f'DirectAdmin API returned text/html to {method} {command} containing "{snippet}"',
                command=command,
                status_code=response.status_code,
            )
        return response.text
