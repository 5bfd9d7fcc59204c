#!/usr/bin/env python3
"""
DataDog integration for Dog Watcher
Exports dashboards, screenboards and monitors as JSON files and sends backup events
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union
import logging

import requests

from ..core.errors import DogWatcherError, FetchError, NotificationError
from .outcome import EventKind, NotificationEvent

DEFAULT_API_URL = "https://api.datadoghq.com/api/v1"


class ResourceKind(Enum):
    """Categories of monitoring configuration that get backed up"""
    DASH = "dash"
    SCREEN = "screen"
    MONITOR = "monitor"


# Fixed export order of a backup run
RESOURCE_KINDS = (ResourceKind.DASH, ResourceKind.SCREEN, ResourceKind.MONITOR)

EVENT_TITLES = {
    EventKind.PASS: "Dog Watcher backup succeeded",
    EventKind.FAIL: "Dog Watcher backup failed",
    EventKind.INFORMATIONAL: "Dog Watcher backup had nothing to commit",
}

EVENT_ALERT_TYPES = {
    EventKind.PASS: "success",
    EventKind.FAIL: "error",
    EventKind.INFORMATIONAL: "info",
}


class DataDogClient:
    """Talks to the DataDog v1 API"""

    def __init__(self, api_key: str, app_key: str, api_url: str = DEFAULT_API_URL,
                 timeout: float = 30, event_tags: Optional[List[str]] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.event_tags = list(event_tags or [])
        self.logger = logger or logging.getLogger("dog-watcher")

        self.session = session or requests.Session()
        self.session.headers.update({
            'DD-API-KEY': api_key,
            'DD-APPLICATION-KEY': app_key,
            'Content-Type': 'application/json',
            'User-Agent': 'Dog-Watcher/1.0'
        })

    def _request(self, method: str, path: str, error_class: Type[DogWatcherError] = FetchError, **kwargs) -> Any:
        """Issue a request and return the decoded JSON body"""
        url = f"{self.api_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise error_class(f"{method} {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise error_class(self._error_message(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise error_class(f"Invalid JSON from {url}: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Prefer the API's own error text over the bare status code"""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get('errors'):
            errors = body['errors']
            if isinstance(errors, list):
                return "; ".join(str(error) for error in errors)
            return str(errors)

        return f"HTTP {response.status_code}: {response.text[:200]}"

    # Export

    def fetch_resources(self, kind: Union[ResourceKind, str], destination: Union[str, Path]) -> int:
        """Fetch all resources of a kind and write them under destination/<kind>/.

        Returns the number of files written.
        """
        kind = ResourceKind(kind)
        if kind is ResourceKind.MONITOR:
            documents = self.get_monitors()
        else:
            documents = self.get_boards(kind)

        written = self._write_documents(Path(destination) / kind.value, documents)
        self.logger.info(f"Exported {written} {kind.value} resource(s)")
        return written

    def get_boards(self, kind: ResourceKind) -> Dict[str, Any]:
        """Get every dashboard (timeboard) or screenboard, keyed by id"""
        list_key = 'dashes' if kind is ResourceKind.DASH else 'screenboards'
        listing = self._request('GET', f"/{kind.value}") or {}
        if not isinstance(listing, dict):
            raise FetchError(f"Unexpected {kind.value} listing payload")

        documents = {}
        for summary in listing.get(list_key, []):
            board_id = str(summary['id'])
            documents[board_id] = self._request('GET', f"/{kind.value}/{board_id}")
        return documents

    def get_monitors(self) -> Dict[str, Any]:
        """Get every monitor, keyed by id"""
        monitors = self._request('GET', "/monitor") or []
        if not isinstance(monitors, list):
            raise FetchError("Unexpected monitor listing payload")
        return {str(monitor['id']): monitor for monitor in monitors}

    def _write_documents(self, directory: Path, documents: Dict[str, Any]) -> int:
        """Write documents as stable JSON and drop files of deleted objects"""
        try:
            directory.mkdir(parents=True, exist_ok=True)

            expected = {f"{doc_id}.json" for doc_id in documents}
            for stale in directory.glob("*.json"):
                if stale.name not in expected:
                    stale.unlink()
                    self.logger.debug(f"Removed stale backup file {stale}")

            for doc_id, document in documents.items():
                content = json.dumps(document, indent=2, sort_keys=True) + "\n"
                (directory / f"{doc_id}.json").write_text(content, encoding="utf-8")
        except OSError as e:
            raise FetchError(f"Could not write resources to {directory}: {e}") from e

        return len(documents)

    # Events

    def send_event(self, event: NotificationEvent) -> bool:
        """Post the outcome of a run to the DataDog event stream"""
        payload = {
            'title': EVENT_TITLES[event.kind],
            'text': event.message or "",
            'alert_type': EVENT_ALERT_TYPES[event.kind],
            'tags': self.event_tags,
            'source_type_name': 'dog-watcher',
        }
        self._request('POST', "/events", error_class=NotificationError, json=payload)
        return True
