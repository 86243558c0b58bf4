"""
wpmcp CLI — WordPress/WooCommerce MCP server

Usage:
    wpmcp [--transport stdio|sse] [--config PATH] [--port N]

Commands:
    wpmcp init        Create ~/.wpmcp/ and generate config.env
    wpmcp status      List configured sites
    wpmcp mcp-config  Print Claude Desktop/Code JSON config
"""

import asyncio
import json
import shutil
import sys
from pathlib import Path

import click

from wpmcp import __version__
from wpmcp.config import Config
from wpmcp.errors import ConfigError


def _load_registry(config_path):
    from wpmcp.sites import SiteRegistry, SiteStore

    try:
        return SiteRegistry(SiteStore(config_path or Config.CONFIG_PATH))
    except ConfigError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)


@click.group(invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-t", "--transport", default=None, help="Transport to serve: stdio or sse.")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to the sites JSON document.")
@click.option("-p", "--port", type=int, default=None, help="Port for the SSE transport.")
@click.version_option(__version__, "-v", "--version", prog_name="wpmcp")
@click.pass_context
def main(ctx, transport, config_path, port):
    """WordPress and WooCommerce tools over MCP."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    if ctx.invoked_subcommand is not None:
        return

    if transport is not None and transport not in Config.TRANSPORTS:
        click.echo(
            f"Error: unknown transport '{transport}' (expected one of: {', '.join(Config.TRANSPORTS)})",
            err=True,
        )
        sys.exit(1)

    sites = _load_registry(config_path)
    settings = sites.server_settings
    transport = transport or settings.get("transport") or "stdio"
    if transport not in Config.TRANSPORTS:
        click.echo(f"Error: unknown transport '{transport}' in config", err=True)
        sys.exit(1)

    from wpmcp.server.server import MCPServer
    from wpmcp.tools import register_all

    server = MCPServer(sites)
    register_all(server)

    if transport == "sse":
        from wpmcp.server.sse import serve_sse

        port = port or (settings.get("http") or {}).get("port") or Config.DEFAULT_PORT
        click.echo(f"Serving MCP over SSE on port {port}", err=True)
        runner = serve_sse(server, port=port)
    else:
        from wpmcp.server.transport import StdioTransport

        runner = server.run(StdioTransport())

    try:
        asyncio.run(runner)
    except KeyboardInterrupt:
        pass


@main.command()
def init():
    """Initialize wpmcp: create ~/.wpmcp/, generate config.env, print setup instructions."""
    Config.ensure_dirs()

    config_env = Config.DATA_DIR / "config.env"
    if not config_env.exists():
        config_env.write_text(
            "# wpmcp Configuration\n"
            "# Uncomment and edit as needed.\n"
            "\n"
            "# WPMCP_DATA_DIR=~/.wpmcp\n"
            "# WPMCP_CONFIG=~/.wpmcp/config.json\n"
            "# WPMCP_LOG_LEVEL=DEBUG\n"
            "# WPMCP_REQUEST_TIMEOUT=30\n"
            "# WPMCP_PORT=3000\n"
        )

    click.echo(f"wpmcp initialized at {Config.DATA_DIR}")
    click.echo(f"  Config: {config_env}")
    click.echo(f"  Sites:  {Config.CONFIG_PATH}")
    click.echo(f"  Logs:   {Config.LOG_DIR}")
    click.echo()
    click.echo("Next: add a site with the add_site tool, then add wpmcp to your Claude settings.")
    click.echo("Run `wpmcp mcp-config` to get the JSON snippet.")


@main.command()
@click.pass_context
def status(ctx):
    """List configured sites and mark the active one."""
    sites = _load_registry(ctx.obj.get("config_path"))
    records = sites.all()
    if not records:
        click.echo("No sites configured. Use the add_site tool to add one.")
        return

    active = sites.get_active()
    click.echo("wpmcp Sites")
    click.echo("=" * 40)
    for site in records:
        marker = "*" if active and site.id == active.id else " "
        backends = []
        if site.has_wordpress_credentials:
            backends.append("wordpress")
        if site.has_woocommerce_credentials:
            backends.append("woocommerce")
        click.echo(f"{marker} {site.name}  {site.url}  [{', '.join(backends) or 'no credentials'}]")
        click.echo(f"    id: {site.id}")


@main.command("mcp-config")
def mcp_config():
    """Print MCP config JSON for Claude Desktop or Claude Code."""
    command, prefix = _find_wpmcp_command()
    config = {
        "mcpServers": {
            "wordpress": {
                "command": command,
                "args": prefix + ["--transport", "stdio"],
            }
        }
    }

    click.echo("Add this to your Claude settings:\n")
    click.echo(json.dumps(config, indent=2))
    click.echo()
    click.echo("Claude Desktop: Settings > Developer > Edit Config")
    click.echo("Claude Code:    .claude/settings.json or ~/.claude/settings.json")


def _find_wpmcp_command():
    """Find the wpmcp command path, falling back to `python -m wpmcp`."""
    path = shutil.which("wpmcp")
    if path:
        return path, []
    return sys.executable, ["-m", "wpmcp"]


if __name__ == "__main__":
    main()
