import json
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from dog_watcher.backup.datadog_client import DataDogClient, ResourceKind
from dog_watcher.backup.outcome import EventKind, NotificationEvent
from dog_watcher.core.errors import FetchError, NotificationError

API = "https://api.example.com/api/v1"


def make_client(routes, tags=None):
    """Client whose session answers GET/POST requests from a route table"""
    session = MagicMock()
    session.headers = {}

    def request(method, url, **kwargs):
        return routes[(method, url)]

    session.request.side_effect = request
    client = DataDogClient("api-key", "app-key", api_url=API + "/", timeout=5,
                           event_tags=tags or ["dog-watcher"], session=session)
    return client, session


def test_auth_headers_are_set():
    client, session = make_client({})

    assert session.headers["DD-API-KEY"] == "api-key"
    assert session.headers["DD-APPLICATION-KEY"] == "app-key"
    assert client.api_url == API


def test_fetch_dashboards_writes_one_file_per_board(tmp_path):
    client, session = make_client({
        ("GET", f"{API}/dash"): make_response(200, {"dashes": [{"id": "12"}, {"id": 34}]}),
        ("GET", f"{API}/dash/12"): make_response(200, {"dash": {"title": "Web", "id": 12}}),
        ("GET", f"{API}/dash/34"): make_response(200, {"dash": {"title": "DB", "id": 34}}),
    })

    written = client.fetch_resources(ResourceKind.DASH, tmp_path)

    assert written == 2
    content = (tmp_path / "dash" / "12.json").read_text()
    assert json.loads(content) == {"dash": {"title": "Web", "id": 12}}
    assert content.index('"id"') < content.index('"title"')
    assert (tmp_path / "dash" / "34.json").exists()
    assert all(call.kwargs["timeout"] == 5 for call in session.request.call_args_list)


def test_fetch_screenboards_uses_screen_endpoints(tmp_path):
    client, _ = make_client({
        ("GET", f"{API}/screen"): make_response(200, {"screenboards": [{"id": 7}]}),
        ("GET", f"{API}/screen/7"): make_response(200, {"board_title": "Ops", "id": 7}),
    })

    assert client.fetch_resources("screen", tmp_path) == 1
    assert json.loads((tmp_path / "screen" / "7.json").read_text())["board_title"] == "Ops"


def test_fetch_monitors_removes_files_of_deleted_monitors(tmp_path):
    stale_dir = tmp_path / "monitor"
    stale_dir.mkdir()
    (stale_dir / "99.json").write_text("{}\n")

    client, _ = make_client({
        ("GET", f"{API}/monitor"): make_response(200, [{"id": 5, "name": "CPU high"}]),
    })

    assert client.fetch_resources(ResourceKind.MONITOR, tmp_path) == 1
    assert not (stale_dir / "99.json").exists()
    assert json.loads((stale_dir / "5.json").read_text())["name"] == "CPU high"


def test_api_error_text_becomes_fetch_error_message(tmp_path):
    client, _ = make_client({
        ("GET", f"{API}/monitor"): make_response(429, {"errors": ["rate limited"]}),
    })

    with pytest.raises(FetchError) as excinfo:
        client.fetch_resources(ResourceKind.MONITOR, tmp_path)

    assert str(excinfo.value) == "rate limited"


def test_connection_error_becomes_fetch_error(tmp_path):
    client, session = make_client({})
    session.request.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(FetchError, match="connection refused"):
        client.fetch_resources(ResourceKind.DASH, tmp_path)


def test_unexpected_listing_payload_is_fetch_error(tmp_path):
    client, _ = make_client({
        ("GET", f"{API}/monitor"): make_response(200, {"monitors": []}),
    })

    with pytest.raises(FetchError):
        client.fetch_resources(ResourceKind.MONITOR, tmp_path)


@pytest.mark.parametrize("kind, alert_type, title", [
    (EventKind.PASS, "success", "Dog Watcher backup succeeded"),
    (EventKind.FAIL, "error", "Dog Watcher backup failed"),
    (EventKind.INFORMATIONAL, "info", "Dog Watcher backup had nothing to commit"),
])
def test_send_event_posts_alert_type_per_kind(kind, alert_type, title):
    client, session = make_client({
        ("POST", f"{API}/events"): make_response(202, {"status": "ok"}),
    }, tags=["env:prod"])

    assert client.send_event(NotificationEvent(kind, "details")) is True

    payload = session.request.call_args.kwargs["json"]
    assert payload["alert_type"] == alert_type
    assert payload["title"] == title
    assert payload["text"] == "details"
    assert payload["tags"] == ["env:prod"]


def test_send_event_failure_is_notification_error():
    client, _ = make_client({
        ("POST", f"{API}/events"): make_response(403, {"errors": ["Forbidden"]}),
    })

    with pytest.raises(NotificationError, match="Forbidden"):
        client.send_event(NotificationEvent(EventKind.PASS))
