"""Tests for the secretfetch command line."""
import sys

import pytest
import yaml

from secretfetch.cli import main as cli
from secretfetch.secrets.domains.identifiers import SecretID


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["secretfetch", *argv])
    with pytest.raises(SystemExit) as exc_info:
        cli.main()
        raise SystemExit(0)
    return exc_info.value.code


@pytest.fixture
def agent_config(tmp_path, agent_root, temp_home):
    path = tmp_path / "agent.yml"
    path.write_text(yaml.dump({"vault": {"use_agent": True, "agent_root": str(agent_root)}}))
    return path


class TestSecretsCommands:
    """secrets list / resolve / check."""

    def test_list(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "secrets", "list") == 0

        out = capsys.readouterr().out
        for secret_id in SecretID:
            assert secret_id.key in out

    def test_resolve_agent_path(self, monkeypatch, capsys, agent_config, agent_root):
        assert run_cli(monkeypatch, "secrets", "resolve", "DB_URI", "--config", str(agent_config)) == 0
        assert f"db/uri -> {agent_root}/db/uri" in capsys.readouterr().out

    def test_resolve_env_backend(self, monkeypatch, capsys, tmp_path, temp_home):
        config = tmp_path / "env.yml"
        config.write_text(yaml.dump({"secrets": {"backend": "env", "mapping": "myapp_{id}"}}))

        assert run_cli(monkeypatch, "secrets", "resolve", "slack/token", "--config", str(config)) == 0
        assert "slack/token -> $MYAPP_SLACK_TOKEN" in capsys.readouterr().out

    def test_resolve_unknown_identifier(self, monkeypatch, capsys, agent_config):
        assert run_cli(monkeypatch, "secrets", "resolve", "nope", "--config", str(agent_config)) == 2
        assert "Unknown secret identifier" in capsys.readouterr().err

    def test_check_all_ok(self, monkeypatch, capsys, agent_config):
        assert run_cli(monkeypatch, "secrets", "check", "--config", str(agent_config)) == 0

        out = capsys.readouterr().out
        assert "db: ok" in out
        assert "server: 3 API key(s)" in out
        assert "secretfetch.test" in out
        # values never printed
        assert "postgres://u:p@host/db" not in out
        assert "xoxb-slack" not in out

    def test_check_reports_first_failure(self, monkeypatch, capsys, agent_config, agent_root):
        (agent_root / "github" / "app" / "id").write_bytes(b"0")

        assert run_cli(monkeypatch, "secrets", "check", "--config", str(agent_config)) == 1

        err = capsys.readouterr().err
        assert "ValidationError" in err
        assert "error getting GitHub secrets" in err

    def test_check_single_domain_without_tls(self, monkeypatch, capsys, agent_config, agent_root):
        (agent_root / "tls" / "cert").unlink()

        code = run_cli(monkeypatch, "secrets", "check", "--config", str(agent_config),
                       "--domain", "server", "--disable-tls")

        assert code == 0
        out = capsys.readouterr().out
        assert "server: ok" in out
        assert "TLS certificate" not in out

    def test_check_bad_backend(self, monkeypatch, capsys, tmp_path, temp_home):
        config = tmp_path / "bad.yml"
        config.write_text(yaml.dump({"secrets": {"backend": "consul", "mapping": "{id}"}}))

        assert run_cli(monkeypatch, "secrets", "check", "--config", str(config)) == 1
        assert "invalid secrets backend" in capsys.readouterr().err


class TestMiscCommands:

    def test_version(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "version") == 0
        assert cli.VERSION in capsys.readouterr().out

    def test_no_command_is_usage_error(self, monkeypatch):
        assert run_cli(monkeypatch) == 2

    def test_secrets_without_subcommand(self, monkeypatch):
        assert run_cli(monkeypatch, "secrets") == 2
