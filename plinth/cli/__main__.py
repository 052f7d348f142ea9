"""Plinth CLI - Main Entry Point.

Commands:
    inspect   - Compose a module and show what was mounted
    providers - Compose a module and list each container's providers
"""

import json
import logging
import sys
from typing import Optional

import click

from . import __version__, __cli_name__
from ..config import ConfigLoader
from ..errors import CompositionError
from ..di.errors import DIError
from .utils.colors import error, info, dim, section, kv, table, _CHECK, _CROSS


class PlinthGroup(click.Group):
    """Click group with aligned command listing."""

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=48)))

        if commands:
            with formatter.section(click.style("Commands", fg="cyan", bold=True)):
                width = max(len(name) for name, _ in commands) + 2
                for name, help_text in commands:
                    formatter.write(f"  {click.style(name.ljust(width), fg='green')} {help_text}\n")


@click.group(cls=PlinthGroup)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help="YAML/JSON settings file")
@click.option("--env-file", type=click.Path(dir_okay=False), help=".env file with PLINTH_* settings")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, config_path: Optional[str], env_file: Optional[str], verbose: bool):
    """Inspect plinth module graphs.

    \b
    Quick start:
      plinth inspect myapp.main:AppModule
      plinth providers myapp.main:AppModule
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["env_file"] = env_file
    ctx.obj["verbose"] = verbose


def _settings(ctx: click.Context, **overrides):
    overrides = {k: v for k, v in overrides.items() if v is not None}
    settings = ConfigLoader.load(
        ctx.obj.get("config_path"),
        env_file=ctx.obj.get("env_file"),
        overrides=overrides,
    )
    level = "DEBUG" if ctx.obj.get("verbose") else settings.log_level
    logging.basicConfig(level=logging.WARNING)
    logging.getLogger("plinth").setLevel(level.upper())
    return settings


def _fail(message: str) -> None:
    error(f"  {_CROSS} {message}")
    sys.exit(1)


@cli.command("inspect")
@click.argument("target")
@click.option("--host", default=None, help="Host node factory, e.g. 'plinth.testing:MockApp'")
@click.option("--strict/--no-strict", default=None, help="Disable auto-registration")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
@click.pass_context
def inspect_cmd(ctx, target: str, host: Optional[str], strict: Optional[bool], as_json: bool):
    """Compose TARGET (package.module:AppModule) and show mounts."""
    from .commands.inspect import build_report, compose_target

    try:
        settings = _settings(ctx, host=host, strict=strict)
        _, app = compose_target(target, settings, ctx.obj.get("verbose", False))
        report = build_report(app)
    except (CompositionError, DIError, ImportError, ValueError) as e:
        _fail(f"Inspection failed: {e}")
        return

    if as_json:
        click.echo(json.dumps(report, indent=2))
        return

    section("Modules")
    for node in report["nodes"]:
        kv(node["name"] or "<anonymous>", node["prefix"] or "/")
        for kind, hooks in node["hooks"].items():
            dim(f"      {kind}: {', '.join(hooks)}")

    click.echo()
    section("Routes")
    table(
        ["Method", "Path", "Handler", "Guard"],
        [
            [r["method"], r["path"], r["handler"], _CHECK if r["guarded"] else ""]
            for r in report["routes"]
        ],
    )

    if report["ws_routes"]:
        click.echo()
        section("WebSocket")
        table(
            ["Path", "Handlers"],
            [[w["path"], ", ".join(w["handlers"])] for w in report["ws_routes"]],
        )

    if report["macros"]:
        click.echo()
        section("Macros")
        click.echo(f"  {', '.join(report['macros'])}")

    click.echo()
    info(f"  {_CHECK} {len(report['routes'])} routes, {len(report['ws_routes'])} websocket routes")


@cli.command("providers")
@click.argument("target")
@click.option("--host", default=None, help="Host node factory")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
@click.pass_context
def providers_cmd(ctx, target: str, host: Optional[str], as_json: bool):
    """Compose TARGET and list every module container's providers."""
    from .commands.inspect import build_provider_report, compose_target

    try:
        settings = _settings(ctx, host=host)
        composer, _ = compose_target(target, settings, ctx.obj.get("verbose", False))
        report = build_provider_report(composer)
    except (CompositionError, DIError, ImportError, ValueError) as e:
        _fail(f"Inspection failed: {e}")
        return

    if as_json:
        click.echo(json.dumps(report, indent=2))
        return

    for entry in report:
        section(entry["module"])
        kv("Parent", entry["parent"] or "-")
        table(
            ["Token", "Kind", "Scope", "Deps"],
            [
                [p["token"], p["kind"], p["scope"], ", ".join(d or "-" for d in p["deps"])]
                for p in entry["providers"]
            ],
        )
        click.echo()


def main():
    """Entry point for `plinth` command."""
    cli(obj={})


if __name__ == "__main__":
    main()
