"""Tests for the command line driver."""

import json

import pytest
from typer.testing import CliRunner

from sshconfman.cli import app
from sshconfman.config import ManagerConfig
from sshconfman.document import read_config
from sshconfman.writer import list_backups

CONFIG = b"Host foo\n  HostName 1.2.3.4\n  Port 22\n\nHost bar\n  User root\n  ForwardAgent yes\n"

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config"
    path.write_bytes(CONFIG)
    return path


def invoke(*args, **kwargs):
    return runner.invoke(app, [str(a) for a in args], **kwargs)


class TestReadCommands:
    def test_list(self, config_path):
        result = invoke("list", "--config", config_path)

        assert result.exit_code == 0
        assert "foo" in result.stdout
        assert "1.2.3.4" in result.stdout
        assert "bar" in result.stdout

    def test_show(self, config_path):
        result = invoke("show", "--config", config_path)

        assert result.exit_code == 0
        assert "ForwardAgent yes" in result.stdout

    def test_export(self, config_path):
        result = invoke("export", "--config", config_path)

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [h["name"] for h in data["hosts"]] == ["foo", "bar"]
        assert data["hosts"][1]["other_lines"] == ["ForwardAgent yes"]

    def test_missing_config(self, tmp_path):
        result = invoke("list", "--config", tmp_path / "missing")

        assert result.exit_code == 1
        assert "Cannot read SSH config" in result.stdout

    def test_resolve(self, config_path):
        result = invoke("resolve", "foo", "--config", config_path)

        assert result.exit_code == 0
        assert "1.2.3.4" in result.stdout


class TestWriteCommands:
    def test_set(self, config_path):
        result = invoke("set", "foo", "--port", "2222", "--user", "admin", "--config", config_path)

        assert result.exit_code == 0
        record = read_config(ManagerConfig(config_path=config_path)).find("foo")
        assert record.port == "2222"
        assert record.user == "admin"
        assert record.host_name == "1.2.3.4"

    def test_set_with_identity(self, config_path):
        identity = read_config(ManagerConfig(config_path=config_path)).find("bar").identity

        result = invoke("set", "bar", "--id", identity, "--hostname", "bar.example", "--config", config_path)

        assert result.exit_code == 0
        assert read_config(ManagerConfig(config_path=config_path)).find("bar").host_name == "bar.example"

    def test_set_stale_identity(self, config_path):
        result = invoke("set", "foo", "--id", "0" * 64, "--port", "1", "--config", config_path)

        assert result.exit_code == 1
        assert config_path.read_bytes() == CONFIG

    def test_set_unknown_host(self, config_path):
        result = invoke("set", "nope", "--port", "1", "--config", config_path)

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_set_nothing(self, config_path):
        result = invoke("set", "foo", "--config", config_path)

        assert result.exit_code == 0
        assert config_path.read_bytes() == CONFIG

    def test_add(self, config_path):
        result = invoke("add", "baz", "--hostname", "baz.example", "--config", config_path)

        assert result.exit_code == 0
        assert read_config(ManagerConfig(config_path=config_path)).host_names() == ["foo", "bar", "baz"]

    def test_add_existing(self, config_path):
        result = invoke("add", "foo", "--config", config_path)

        assert result.exit_code == 1
        assert config_path.read_bytes() == CONFIG

    @pytest.mark.parametrize("args", [
        ["add", ""],
        ["add", "baz", "--hostname", "x\nProxyCommand evil"],
        ["add", "baz", "--user", " root"],
        ["set", "foo", "--port", ""],
        ["set", "foo", "--identity-file", "~/.ssh/jump-host key"],
    ])
    def test_invalid_value_leaves_file(self, config_path, args):
        result = invoke(*args, "--config", config_path)

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert config_path.read_bytes() == CONFIG
        assert list_backups(ManagerConfig(config_path=config_path)) == []

    def test_remove(self, config_path):
        result = invoke("remove", "foo", "--config", config_path)

        assert result.exit_code == 0
        assert config_path.read_text() == "Host bar\n  User root\n  ForwardAgent yes\n"

    def test_backups_and_restore(self, config_path):
        invoke("remove", "foo", "--config", config_path)
        settings = ManagerConfig(config_path=config_path)
        backups = list_backups(settings)
        assert len(backups) == 1

        listed = invoke("backups", "--config", config_path)
        assert backups[0].name in listed.stdout

        result = invoke("restore", backups[0], "--config", config_path, input="y\n")

        assert result.exit_code == 0
        assert config_path.read_bytes() == CONFIG
        assert len(list_backups(settings)) == 2


class TestInitSettings:
    def test_writes_template(self, tmp_path):
        path = tmp_path / "settings.yaml"
        result = invoke("init-settings", path)

        assert result.exit_code == 0
        assert "backup_dir_name" in path.read_text()

    def test_settings_used(self, tmp_path, config_path):
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text(f"config_path: {config_path}\nbackup_dir_name: old\n")

        result = invoke("remove", "bar", "--settings", settings_path)

        assert result.exit_code == 0
        assert len(list((tmp_path / "old").iterdir())) == 1

    @pytest.mark.parametrize("content", [
        "chunk_size: -1\n",
        "config_path: [unclosed\n",
        "- indent\n",
    ])
    def test_invalid_settings(self, tmp_path, config_path, content):
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text(content)

        result = invoke("list", "--config", config_path, "--settings", settings_path)

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert "Traceback" not in result.stdout
