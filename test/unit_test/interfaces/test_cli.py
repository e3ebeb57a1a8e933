import json

import httpx
import pytest

from github import __version__
from github.interfaces import cli
from github.service import CapabilityService


@pytest.fixture
def cli_service(monkeypatch, mock_github):
    """Point the CLI at the fake GitHub instead of api.github.com."""
    services = []

    def build(settings):
        service = CapabilityService.from_settings(settings, client=mock_github.client())
        services.append(service)
        return service

    monkeypatch.setattr(cli, "_build_service", build)
    return services


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 2
    assert "usage: github" in capsys.readouterr().out


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


class TestCapabilitiesCommand:
    def test_table(self, cli_service, capsys):
        assert cli.main(["capabilities"]) == 0

        out = capsys.readouterr().out
        assert "issue.create" in out
        assert "write" in out
        assert len(out.strip().splitlines()) == 13

    def test_json(self, cli_service, capsys):
        assert cli.main(["capabilities", "--json"]) == 0

        described = json.loads(capsys.readouterr().out)
        assert {item["name"] for item in described} >= {"repo.get", "search.issues"}

    def test_read_only_server_marks_mutations(self, cli_service, capsys, monkeypatch):
        monkeypatch.setenv("GITHUB_READ_ONLY", "true")

        cli.main(["capabilities"])

        line = next(ln for ln in capsys.readouterr().out.splitlines() if ln.startswith("issue.create"))
        assert "disabled" in line


class TestDescribeCommand:
    def test_describe(self, cli_service, capsys):
        assert cli.main(["describe", "issue.list"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("issue.list: List issues of a repository")
        assert "state (str, optional, default=open, choices=open|closed|all)" in out

    def test_describe_shows_integer_bounds(self, cli_service, capsys):
        assert cli.main(["describe", "pull.list"]) == 0
        assert "per_page (int, optional, default=30, min=1, max=100)" in capsys.readouterr().out

    def test_describe_without_arguments(self, cli_service, capsys):
        assert cli.main(["describe", "user.me"]) == 0
        assert "arguments: none" in capsys.readouterr().out

    def test_describe_unknown(self, cli_service, capsys):
        assert cli.main(["describe", "repo.delete"]) == 1
        assert "Unknown capability: 'repo.delete'" in capsys.readouterr().err


class TestInvokeCommand:
    def test_invoke_with_key_value_pairs(self, cli_service, capsys, mock_github, payloads):
        mock_github.add("GET", "/repos/octocat/hello-world/issues/3", json=payloads.issue(3))

        assert cli.main(["invoke", "issue.get", "-a", "repo=octocat/hello-world", "-a", "number=3"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["number"] == 3

    def test_invoke_with_json_args(self, cli_service, capsys, mock_github, payloads):
        mock_github.add("POST", "/repos/me/app/issues", status=201, json=payloads.issue(8, title="Bug"))

        code = cli.main(
            ["invoke", "issue.create", "--compact", "--args-json", '{"repo": "me/app", "title": "Bug", "labels": ["bug"]}']
        )

        assert code == 0
        out = capsys.readouterr().out
        assert out.count("\n") == 1
        assert json.loads(out)["title"] == "Bug"
        assert json.loads(mock_github.requests[0].content)["labels"] == ["bug"]

    def test_pairs_override_json(self, cli_service, capsys, mock_github, payloads):
        mock_github.add("GET", "/repos/octocat/other", json=payloads.repo(name="other"))

        code = cli.main(["invoke", "repo.get", "--args-json", '{"repo": "octocat/hello-world"}', "-a", "repo=octocat/other"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["name"] == "other"

    def test_capability_errors_exit_1(self, cli_service, capsys):
        assert cli.main(["invoke", "issue.get", "-a", "repo=octocat/hello-world"]) == 1
        assert "missing required argument(s): number" in capsys.readouterr().err

    @pytest.mark.parametrize("limit", ["--5", "-1", "²"])
    def test_bad_integer_arguments_exit_1(self, cli_service, capsys, mock_github, limit):
        assert cli.main(["invoke", "repo.list", "-a", "owner=octocat", "-a", f"limit={limit}"]) == 1
        assert "'limit' must be" in capsys.readouterr().err
        assert mock_github.requests == []

    def test_github_errors_exit_1(self, cli_service, capsys, mock_github):
        mock_github.add("GET", "/user", status=401, json={"message": "Bad credentials"})

        assert cli.main(["invoke", "user.me"]) == 1
        assert "GitHub denied access" in capsys.readouterr().err

    def test_each_invoke_builds_one_service(self, cli_service, mock_github, payloads):
        mock_github.add("GET", "/user", json=payloads.user())
        cli.main(["invoke", "user.me"])

        assert len(cli_service) == 1

    @pytest.mark.parametrize(
        "argv",
        [
            ["invoke", "repo.get", "-a", "no-equals-sign"],
            ["invoke", "repo.get", "--args-json", "{not json"],
            ["invoke", "repo.get", "--args-json", "[1, 2]"],
        ],
    )
    def test_malformed_arguments_are_usage_errors(self, cli_service, argv):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(argv)

        assert exc_info.value.code == 2


class TestServeCommand:
    def test_serve_uses_settings(self, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))
        monkeypatch.setenv("GITHUB_API_PORT", "9001")

        assert cli.main(["serve"]) == 0

        app_path, kwargs = calls[0]
        assert app_path == "github.interfaces.rest:app"
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9001
        assert kwargs["workers"] == 1

    def test_serve_flags_override_settings(self, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))

        cli.main(["serve", "--host", "127.0.0.1", "--port", "8080", "--workers", "4"])

        assert calls[0]["host"] == "127.0.0.1"
        assert calls[0]["port"] == 8080
        assert calls[0]["workers"] == 4

    def test_reload_forces_single_worker(self, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))

        cli.main(["serve", "--workers", "4", "--reload"])

        assert calls[0]["workers"] == 1
        assert calls[0]["reload"] is True

    def test_serve_log_level_follows_settings(self, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))
        monkeypatch.setenv("GITHUB_LOG_LEVEL", "ERROR")

        cli.main(["serve"])

        assert calls[0]["log_level"] == "error"

    def test_global_log_level_flag_reaches_the_server(self, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))
        monkeypatch.setenv("GITHUB_LOG_LEVEL", "ERROR")

        cli.main(["--log-level", "WARNING", "serve"])

        assert calls[0]["log_level"] == "warning"


class TestHealthCommand:
    def test_healthy(self, monkeypatch, capsys):
        seen = {}

        def fake_get(url, timeout):
            seen.update(url=url, timeout=timeout)
            return httpx.Response(200, json={"status": "ok"})

        monkeypatch.setattr(httpx, "get", fake_get)

        assert cli.main(["health"]) == 0
        assert seen == {"url": "http://127.0.0.1:8000/health", "timeout": 3.0}
        assert "healthy" in capsys.readouterr().out

    def test_unhealthy_status(self, monkeypatch, capsys):
        monkeypatch.setattr(httpx, "get", lambda url, timeout: httpx.Response(503))

        assert cli.main(["health", "--url", "http://127.0.0.1:9000/health"]) == 1
        assert "503" in capsys.readouterr().err

    def test_connection_refused(self, monkeypatch, capsys):
        def refuse(url, timeout):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(httpx, "get", refuse)

        assert cli.main(["health"]) == 1
        assert "unhealthy" in capsys.readouterr().err


class TestConfigCommand:
    def test_config_masks_token(self, monkeypatch, capsys):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")

        assert cli.main(["config"]) == 0

        out = capsys.readouterr().out
        assert "ghp_secret" not in out
        assert json.loads(out)["GITHUB_TOKEN"] == "***"

    def test_invalid_configuration_exits_2(self, monkeypatch, capsys):
        monkeypatch.setenv("GITHUB_API_PORT", "not-a-port")

        assert cli.main(["config"]) == 2
        assert "invalid configuration" in capsys.readouterr().err

    @pytest.mark.parametrize("name,value", [("GITHUB_LOG_LEVEL", "verbose"), ("GITHUB_LOG_FORMAT", "xml")])
    def test_invalid_logging_configuration_exits_2(self, monkeypatch, capsys, name, value):
        monkeypatch.setenv(name, value)

        assert cli.main(["config"]) == 2
        assert "must be one of" in capsys.readouterr().err


def test_cache_is_configured_from_settings(cli_service, mock_github, payloads):
    mock_github.add("GET", "/user", json=payloads.user())
    cli.main(["invoke", "user.me"])

    assert cli_service[0].cache.enabled
    assert cli_service[0].cache.size() == 1
