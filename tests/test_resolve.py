"""Tests for effective host resolution."""

import pytest

from sshconfman.errors import SourceUnavailableError
from sshconfman.resolve import resolve_host

CONFIG = """Host web
  HostName 10.0.0.1
  Port 2222
  User deploy
  IdentityFile /keys/web

Host db db-replica
  HostName 10.0.0.2

Host *
  User fallback
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config"
    path.write_text(CONFIG)
    return path


class TestResolveHost:
    def test_explicit_host(self, config_path):
        resolved = resolve_host(config_path, "web")

        assert resolved.alias == "web"
        assert resolved.hostname == "10.0.0.1"
        assert resolved.port == 2222
        assert resolved.user == "deploy"
        assert resolved.identity_file == "/keys/web"

    def test_wildcard_fills_missing(self, config_path):
        resolved = resolve_host(config_path, "db")

        assert resolved.hostname == "10.0.0.2"
        assert resolved.user == "fallback"
        assert resolved.port == 22

    def test_unknown_alias(self, config_path):
        resolved = resolve_host(config_path, "elsewhere.example")

        assert resolved.hostname == "elsewhere.example"
        assert resolved.user == "fallback"
        assert resolved.identity_file is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError):
            resolve_host(tmp_path / "missing", "web")
