import json
from unittest.mock import MagicMock

import pytest
import requests

from dog_watcher.backup.git_repository import CommitOutcome
from dog_watcher.core.config import PipelineSettings


def make_response(status_code=200, payload=None):
    """Build a real requests.Response carrying a JSON payload"""
    response = requests.Response()
    response.status_code = status_code
    response._content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def settings():
    return PipelineSettings(
        repo_url="git@example.com:ops/datadog-backup.git",
        commit_message="Backup from {IP}",
        send_event_on_noop=True,
    )


@pytest.fixture
def workspace_path(tmp_path):
    path = tmp_path / "dog-watcher-work"
    path.mkdir()
    return path


@pytest.fixture
def workspaces(workspace_path):
    manager = MagicMock()
    manager.acquire.return_value = workspace_path
    return manager


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.commit.return_value = CommitOutcome.COMMITTED
    return repo


@pytest.fixture
def exporter():
    return MagicMock()


@pytest.fixture
def notifier():
    client = MagicMock()
    client.send_event.return_value = True
    return client


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: needs external binaries such as git")
