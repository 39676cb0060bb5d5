"""Command line interface for browser-tools."""

from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import ToolsConfig, load_config
from .factory import build_dispatcher, build_session_handle
from .models import ImageContent, TextContent
from .tools.browser import registry

app = typer.Typer(help="Browser Tools entry point")
console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("browser-tools"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


def _load(
    config_path: Optional[Path],
    env_file: Optional[Path],
    headless: Optional[bool],
    executable_path: Optional[Path] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> ToolsConfig:
    overrides: dict[str, Any] = {}
    if headless is not None or executable_path is not None:
        overrides.setdefault("browser", {})
        if headless is not None:
            overrides["browser"]["headless"] = headless
        if executable_path is not None:
            overrides["browser"]["executable_path"] = str(executable_path)
    if host is not None or port is not None:
        overrides.setdefault("server", {})
        if host is not None:
            overrides["server"]["host"] = host
        if port is not None:
            overrides["server"]["port"] = port
    return load_config(config_path, env_file=env_file, **overrides)


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to YAML configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]
HeadlessOption = Annotated[
    Optional[bool],
    typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
]


@app.command()
def serve(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    headless: HeadlessOption = None,
    executable_path: Annotated[
        Optional[Path],
        typer.Option("--executable-path", help="Browser executable to launch."),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Binding address for the HTTP service."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", help="HTTP port for the service."),
    ] = None,
) -> None:
    """Serve the browser commands over HTTP."""

    import uvicorn

    from .service import create_app

    config = _load(config_path, env_file, headless, executable_path, host, port)
    dispatcher = build_dispatcher(build_session_handle(config.browser))
    typer.echo(
        f"Serving {len(dispatcher.names())} browser tools "
        f"on {config.server.host}:{config.server.port}"
    )
    uvicorn.run(create_app(dispatcher), host=config.server.host, port=config.server.port)


@app.command()
def call(
    name: Annotated[str, typer.Argument(help="Tool name, e.g. browser_navigate.")],
    arguments: Annotated[
        Optional[str],
        typer.Option("--args", "-a", help="Tool arguments as a JSON object."),
    ] = None,
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    headless: HeadlessOption = None,
) -> None:
    """Run a single tool in a fresh session and print its result."""

    try:
        payload = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--args is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter("--args must be a JSON object")

    config = _load(config_path, env_file, headless)
    dispatcher = build_dispatcher(build_session_handle(config.browser))
    try:
        try:
            result = dispatcher.call(name, payload)
        except KeyError:
            raise typer.BadParameter(f"Unknown tool: {name}") from None
    finally:
        dispatcher.shutdown()

    for block in result.content:
        if isinstance(block, TextContent):
            typer.echo(block.text)
        elif isinstance(block, ImageContent):
            typer.echo(f"[{block.mime_type}, {len(block.data)} base64 chars]")
    if result.is_error:
        raise typer.Exit(code=1)


@app.command()
def tools() -> None:
    """List the available tools."""

    table = Table(title="Browser tools")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments")
    table.add_column("Description")
    for tool in registry:
        properties = tool.schema().get("properties", {})
        table.add_row(tool.name, ", ".join(properties) or "-", tool.description)
    console.print(table)


if __name__ == "__main__":
    app()
