"""
CLI (plinth inspect / plinth providers)
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from plinth.cli import __version__
from plinth.cli.__main__ import cli
from plinth.cli.commands.inspect import build_report, load_target
from plinth.testing import MockApp


TESTS_DIR = str(Path(__file__).parent)


@pytest.fixture
def runner(clean_env):
    clean_env.syspath_prepend(TESTS_DIR)
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(cli, list(args), obj={})


class TestLoadTarget:

    def test_bad_format(self):
        with pytest.raises(ValueError, match="package.module:AppModule"):
            load_target("sample_app")

    def test_missing_attribute(self, runner):
        with pytest.raises(ValueError, match="NoModule"):
            load_target("sample_app:NoModule")

    def test_report_needs_walkable_host(self):
        with pytest.raises(ValueError, match="does not support inspection"):
            build_report(object())

    def test_report_of_empty_node(self):
        report = build_report(MockApp(name="root"))
        assert report["nodes"] == [{"name": "root", "prefix": "", "hooks": {}}]
        assert report["routes"] == []


class TestInspectCommand:

    def test_version(self, runner):
        result = invoke(runner, "--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = invoke(runner, "--help")
        assert result.exit_code == 0
        assert "inspect" in result.output
        assert "providers" in result.output

    def test_json(self, runner):
        result = invoke(runner, "inspect", "sample_app:AppModule", "--json")
        assert result.exit_code == 0, result.output

        report = json.loads(result.output)
        routes = {(r["method"], r["path"]): r for r in report["routes"]}
        assert routes[("GET", "/api/users/:id")]["guarded"] is True
        assert routes[("GET", "/api/users/:id")]["handler"] == "UsersController.get_one"
        assert routes[("POST", "/api/auth/login")]["guarded"] is False
        assert routes[("POST", "/api/users")]["options"] == ["body", "detail"]
        assert report["ws_routes"] == [{"path": "/api/chat/room", "handlers": ["message", "open"]}]
        assert report["macros"] == ["timed"]

    def test_text(self, runner):
        result = invoke(runner, "inspect", "sample_app:AppModule")
        assert result.exit_code == 0, result.output
        assert "Routes" in result.output
        assert "/api/users/:id" in result.output
        assert "5 routes, 1 websocket routes" in result.output

    def test_bad_target(self, runner):
        result = invoke(runner, "inspect", "sample_app:Nope")
        assert result.exit_code == 1
        assert "Inspection failed" in result.output

    def test_bad_host(self, runner):
        result = invoke(runner, "inspect", "sample_app:AppModule", "--host", "nope")
        assert result.exit_code == 1
        assert "Invalid host reference" in result.output


class TestProvidersCommand:

    def test_json(self, runner):
        result = invoke(runner, "providers", "sample_app:AppModule", "--json")
        assert result.exit_code == 0, result.output

        report = {entry["container"]: entry for entry in json.loads(result.output)}
        assert report["app"]["parent"] is None
        assert report["users"]["parent"] == "app"
        assert report["auth"]["parent"] == "users"

        providers = {p["token"]: p for p in report["app"]["providers"]}
        assert providers["app.name"] == {"token": "app.name", "kind": "value", "scope": "singleton", "deps": []}

    def test_text(self, runner):
        result = invoke(runner, "providers", "sample_app:AppModule")
        assert result.exit_code == 0, result.output
        assert "UsersModule" in result.output
        assert "Parent" in result.output

    def test_verbose(self, runner):
        result = invoke(runner, "--verbose", "providers", "sample_app:AppModule")
        assert result.exit_code == 0, result.output

    def test_config_file(self, runner, tmp_path):
        path = tmp_path / "plinth.yaml"
        path.write_text("host: plinth.testing:MockApp\nstrict: true\n")
        result = invoke(runner, "-c", str(path), "providers", "sample_app:AppModule", "--json")
        assert result.exit_code == 0, result.output

    def test_stray_prefixed_env_var(self, runner):
        result = runner.invoke(cli, ["providers", "sample_app:AppModule", "--json"], obj={}, env={"PLINTH_HOME": "/opt/plinth"})
        assert result.exit_code == 0, result.output
