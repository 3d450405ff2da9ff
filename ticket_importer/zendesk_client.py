from __future__ import annotations

from typing import Any, Dict, List

import requests

from .config import ZendeskConfig
from .fields import RemoteFieldDefinition

class ZendeskClient:
    """
    Thin Zendesk REST client: ticket field definitions and bulk ticket creation.
    Failures are raised as requests exceptions; nothing is retried.
    """

    def __init__(self, cfg: ZendeskConfig, timeout: int = 10):
        self.cfg = cfg
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (f"{cfg.email}/token", cfg.api_token)
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.cfg.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        resp = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        resp.raise_for_status()
        return resp

    def get_ticket_fields(self) -> List[RemoteFieldDefinition]:
        # GET /api/v2/ticket_fields.json
        data = self._request("GET", self.cfg.get_fields).json()
        return [RemoteFieldDefinition.from_api(f) for f in data.get("ticket_fields", [])]

    def create_many(self, tickets: List[Dict[str, Any]]) -> Dict[str, Any]:
        # POST /api/v2/tickets/create_many.json, at most 100 tickets
        resp = self._request("POST", self.cfg.post_many, json={"tickets": tickets})
        return resp.json() if resp.content else {}
