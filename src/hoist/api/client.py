# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/api/client.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from hoist.api.models import HostRecord

log = logging.getLogger("hoist")

API_VERSION = "1.3"


class PlatformAPIError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PlatformClient:
    """
    Minimal client for the platform control API.

    Only the install endpoints are covered: bootstrap, host registration
    and host listing.
    """

    def __init__(
        self,
        target: str,
        *,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.target = target.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.target}/{API_VERSION}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        try:
            r = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise PlatformAPIError(f"{method} {url} failed: {exc}") from exc
        if not 200 <= r.status_code < 300:
            raise PlatformAPIError(f"{method} {url} failed: {r.status_code} {r.text}", r.status_code)
        return r

    # ------------------------
    # Install endpoints
    # ------------------------

    def bootstrap(
        self,
        *,
        login: str,
        password: str,
        target_name: str,
        nodes: Sequence[str],
    ) -> str:
        payload = {
            "login": login,
            "password": password,
            "target": self.target,
            "targetName": target_name,
            "nodes": list(nodes),
        }
        r = self._request("POST", "install/bootstrap", json=payload)
        token = ""
        if r.content:
            try:
                token = r.json().get("token", "")
            except ValueError as exc:
                raise PlatformAPIError(f"invalid bootstrap response: {exc}") from exc
        if token:
            self.token = token
        return token

    def register_host(self, fields: Dict[str, str]) -> None:
        self._request("POST", "install/hosts", data=fields)

    def list_hosts(self) -> List[HostRecord]:
        r = self._request("GET", "install/hosts")
        return [HostRecord.model_validate(h) for h in (r.json() or [])]

    def get_host(self, name: str) -> HostRecord:
        r = self._request("GET", f"install/hosts/{name}")
        return HostRecord.model_validate(r.json())
