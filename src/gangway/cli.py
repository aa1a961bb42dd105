"""Gangwayのコマンドラインインターフェース。"""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gangway.config import GangwayConfig
from gangway.logging_config import configure_logging
from gangway.models.errors import GangwayError
from gangway.services import reporter
from gangway.services.validation import ValidationService

app = typer.Typer(
    name="gangway",
    help="App Store deployment-readiness checks for mobile projects.",
    no_args_is_help=True,
)

console = Console(emoji=False, highlight=False)
err_console = Console(stderr=True, emoji=False, highlight=False)

# 設定・ルール定義の不備（検証結果ではない）
CONFIG_ERROR_EXIT_CODE = 2


def _version_callback(value: bool) -> None:
    if value:
        try:
            current = version("gangway")
        except PackageNotFoundError:
            current = "unknown"
        console.print(f"gangway v{current}")
        raise typer.Exit()


def _service(config_dir: Path | None) -> tuple[GangwayConfig, ValidationService]:
    config = GangwayConfig()
    if config_dir is not None:
        config = config.model_copy(update={"config_dir": config_dir})
    configure_logging(config.log_level, config.log_json)
    return config, ValidationService(config_dir=config.config_dir, default_profile=config.default_profile)


def _fail(error: GangwayError) -> typer.Exit:
    err_console.print(f"[red]{type(error).__name__}:[/red] {escape(str(error))}", markup=True)
    return typer.Exit(CONFIG_ERROR_EXIT_CODE)


@app.callback()
def main_callback(
    version_flag: bool = typer.Option(
        None, "--version", "-v", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """App Store deployment-readiness checks for mobile projects."""


@app.command()
def check(
    root: Path = typer.Argument(Path("."), help="Project root to validate (default: current directory)"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Validation profile"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    strict: bool = typer.Option(False, "--strict", help="Treat ATTENTION as blocking"),
    max_warnings: int | None = typer.Option(None, "--max-warnings", min=0, help="Override the warning threshold"),
    config_dir: Path | None = typer.Option(None, "--config-dir", help="Directory with rule sets and profiles"),
) -> None:
    """Validate a project and exit with the verdict's exit code."""
    _, service = _service(config_dir)
    try:
        report = service.validate(root.resolve(), profile, strict=strict, max_warnings=max_warnings)
        text = reporter.render_json(report) if as_json else service.render(report)
    except GangwayError as e:
        raise _fail(e) from None

    console.print(text, markup=False, soft_wrap=True)
    raise typer.Exit(report.exit_code)


@app.command()
def profiles(
    config_dir: Path | None = typer.Option(None, "--config-dir", help="Directory with rule sets and profiles"),
) -> None:
    """List validation profiles."""
    config, service = _service(config_dir)
    try:
        available = service.profiles()
    except GangwayError as e:
        raise _fail(e) from None

    table = Table(title="Validation profiles")
    table.add_column("Profile")
    table.add_column("Rule sets")
    table.add_column("Max warnings")
    for p in available:
        name = f"{p.name} (default)" if p.name == config.default_profile else p.name
        limit = "-" if p.thresholds.max_warnings is None else str(p.thresholds.max_warnings)
        table.add_row(name, ", ".join(p.rule_sets), limit)
    console.print(table)


@app.command()
def rules(
    profile: str | None = typer.Option(None, "--profile", "-p", help="Validation profile"),
    config_dir: Path | None = typer.Option(None, "--config-dir", help="Directory with rule sets and profiles"),
) -> None:
    """List the rules a profile evaluates, in evaluation order."""
    _, service = _service(config_dir)
    try:
        selected = service.profile(profile)
        rule_sets = service.loader.rule_sets_for(selected)
    except GangwayError as e:
        raise _fail(e) from None

    for rule_set in rule_sets:
        console.print(f"{rule_set.category} - {rule_set.title}", markup=False)
        for rule in rule_set.rules:
            console.print(f"  {rule.id}: {rule.description}", markup=False)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
) -> None:
    """Run the MCP server over streamable HTTP."""
    import uvicorn
    from starlette.middleware import Middleware

    from gangway.middleware import TokenAuthMiddleware
    from gangway.server import create_server

    config, _ = _service(None)
    mcp = create_server(config)
    http_app = mcp.http_app(
        transport="streamable-http",
        middleware=[Middleware(TokenAuthMiddleware, url_token=config.url_token)],
    )
    uvicorn.run(http_app, host=host or config.host, port=port or config.port)


def main() -> None:
    app()
