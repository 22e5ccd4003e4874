from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests
from dotenv import load_dotenv

from .base import DateProvider

logger = logging.getLogger(__name__)


def select_extension_id(user_agent: str, *, firefox_id: str, chrome_id: str) -> str:
    """The date extension is published under a different id per browser."""
    return firefox_id if "Firefox" in (user_agent or "") else chrome_id


@dataclass
class HttpDateProvider(DateProvider):
    """Date extension reached through a local messaging relay.

    The relay forwards {"extensionId", "message"} to the installed extension
    and answers with the extension's reply as JSON.
    """

    relay_url: str
    extension_id: str
    timeout_s: float = 30.0

    name: str = "http"

    @classmethod
    def from_env(cls, *, user_agent: str = "", timeout_s: float = 30.0) -> "HttpDateProvider":
        load_dotenv()
        relay_url = os.environ.get("TABDATE_RELAY_URL", "").strip()
        firefox_id = os.environ.get("TABDATE_FIREFOX_EXTENSION_ID", "").strip()
        chrome_id = os.environ.get("TABDATE_CHROME_EXTENSION_ID", "").strip()
        if not relay_url or not firefox_id or not chrome_id:
            raise RuntimeError(
                "Missing TABDATE_RELAY_URL/TABDATE_FIREFOX_EXTENSION_ID/TABDATE_CHROME_EXTENSION_ID "
                "(set env vars or create .env; see .env.example)"
            )
        extension_id = select_extension_id(user_agent, firefox_id=firefox_id, chrome_id=chrome_id)
        return cls(relay_url=relay_url, extension_id=extension_id, timeout_s=float(timeout_s))

    def request_dates(self, tab_ids: list[int]) -> Any:
        message = {"action": "get-dates", "tabIds": list(tab_ids)}
        logger.info("Sending message to extension %s: %s", self.extension_id, message)

        r = requests.post(
            self.relay_url,
            json={"extensionId": self.extension_id, "message": message},
            timeout=self.timeout_s,
        )
        if r.status_code != 200:
            raise RuntimeError(f"Date relay failed ({r.status_code}): {r.text}")
        if not r.content:
            return None
        return r.json()
