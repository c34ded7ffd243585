"""CLI commands for deviceservice."""

import asyncio
import json
import os
import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from deviceservice import __logo__, __version__

app = typer.Typer(
    name="deviceservice",
    help=f"{__logo__} deviceservice - device discovery control-plane gateway",
    no_args_is_help=True,
)

console = Console()

_KIND_CHOICES = {
    "asset": "asset",
    "scheduled-job": "scheduled_job",
    "scheduled_job": "scheduled_job",
    "crontab": "scheduled_job",
}


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} deviceservice v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """deviceservice - device discovery control-plane gateway."""
    pass


# ============================================================================
# Config Commands
# ============================================================================


config_app = typer.Typer(help="Manage deviceservice config")
app.add_typer(config_app, name="config")


@config_app.command("check")
def config_check(
    config: Path | None = typer.Option(None, "--config", help="Config path to validate"),
):
    """Validate config JSON structure and schema."""
    from deviceservice.config.loader import convert_keys, get_config_path
    from deviceservice.config.schema import Config

    config_path = (config or get_config_path()).expanduser()
    if not config_path.exists():
        console.print(f"[red]Config file not found:[/red] {config_path}")
        raise typer.Exit(2)

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/red] {exc}")
        raise typer.Exit(2) from exc
    except OSError as exc:
        console.print(f"[red]Failed to read config:[/red] {exc}")
        raise typer.Exit(2) from exc

    if not isinstance(raw, dict):
        console.print("[red]Schema validation failed:[/red] config root must be a JSON object")
        raise typer.Exit(1)

    try:
        cfg = Config.model_validate(convert_keys(raw))
    except ValueError as exc:
        console.print(f"[red]Schema validation failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print("[green]✓[/green] Config validation passed")
    console.print(f"path={config_path}")
    console.print(f"server={cfg.server.host}:{cfg.server.port} timeout={cfg.server.request_timeout_seconds}s")
    console.print(
        f"store={cfg.store.backend} "
        f"base_url={cfg.store.base_url or '(in-cluster)'} "
        f"timeout={cfg.store.timeout_seconds}s"
    )
    console.print(f"naming=prefix={cfg.naming.asset_prefix} digest_bytes={cfg.naming.digest_bytes}")
    console.print(f"onvif=namespace={cfg.onvif.asset_namespace} secrets={cfg.onvif.secret_directory or '(unset)'}")


@config_app.command("init")
def config_init(
    config: Path | None = typer.Option(None, "--config", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write a config file populated with defaults."""
    from deviceservice.config.loader import get_config_path, save_config
    from deviceservice.config.schema import Config

    config_path = (config or get_config_path()).expanduser()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {config_path} (use --force to overwrite)")
        raise typer.Exit(1)
    path = save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Wrote default config to {path}")


# ============================================================================
# Naming / Resources
# ============================================================================


@app.command("asset-name")
def asset_name_command(
    identifier: str = typer.Argument(..., help="Device identifier"),
    config: Path | None = typer.Option(None, "--config", help="Config path"),
):
    """Print the Asset name provisioned for a device identifier."""
    from deviceservice.config.loader import load_config
    from deviceservice.reconcile.naming import asset_name

    cfg = load_config(config)
    console.print(
        asset_name(
            identifier.lower(),
            prefix=cfg.naming.asset_prefix,
            size=cfg.naming.digest_bytes,
        ),
        highlight=False,
    )


resources_app = typer.Typer(help="Inspect managed resources")
app.add_typer(resources_app, name="resources")


@resources_app.command("list")
def resources_list(
    kind: str = typer.Option("asset", "--kind", "-k", help="asset or scheduled-job"),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Limit to one namespace"),
    config: Path | None = typer.Option(None, "--config", help="Config path"),
):
    """List managed resources through the store client."""
    from deviceservice.config.loader import load_config
    from deviceservice.models.resources import ResourceKind
    from deviceservice.store import StoreError, create_store_from_config

    resource_kind = _KIND_CHOICES.get(kind.strip().lower())
    if resource_kind is None:
        console.print(f"[red]Unknown kind:[/red] {kind} (expected asset or scheduled-job)")
        raise typer.Exit(2)

    cfg = load_config(config)
    try:
        store = create_store_from_config(cfg.store)
    except ValueError as exc:
        console.print(f"[red]Store unavailable:[/red] {exc}")
        raise typer.Exit(1) from exc

    async def run():
        try:
            return await store.list_resources(ResourceKind(resource_kind), namespace)
        finally:
            await store.close()

    try:
        items = asyncio.run(run())
    except StoreError as exc:
        console.print(f"[red]List failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    if not items:
        console.print("No resources.")
        return

    table = Table(title=f"{resource_kind} resources")
    table.add_column("Namespace", style="cyan")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Spec")
    for item in items:
        if item.kind == ResourceKind.SCHEDULED_JOB:
            summary = f"{item.spec.get('cronSpec', '')} capacity={item.spec.get('capacity', '')}"
        else:
            summary = str(item.spec.get("displayName", ""))
        table.add_row(item.namespace, item.name, item.resource_version, summary)
    console.print(table)


# ============================================================================
# Gateway
# ============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Listen host override"),
    port: int | None = typer.Option(None, "--port", help="Listen port override"),
    store_backend: str | None = typer.Option(None, "--store", help="Store backend override: kube/memory"),
    config: Path | None = typer.Option(None, "--config", help="Config path"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """Start the discovery gateway HTTP API."""
    from loguru import logger

    from deviceservice.api.gateway_server import DeviceGatewayServer
    from deviceservice.config.loader import load_config
    from deviceservice.credentials.resolver import CredentialResolver
    from deviceservice.dispatch import create_dispatch_engine
    from deviceservice.reconcile.reconciler import ResourceReconciler
    from deviceservice.store import create_store_from_config

    cfg = load_config(config)
    if logs:
        logger.enable("deviceservice")
    else:
        logger.disable("deviceservice")

    if host:
        cfg.server.host = host
    if port:
        cfg.server.port = port
    if store_backend:
        cfg.store.backend = store_backend

    console.print(f"{__logo__} Starting deviceservice gateway...")
    console.print(f"gateway-api=http://{cfg.server.host}:{cfg.server.port}")
    console.print(f"store={cfg.store.backend}")
    if not cfg.onvif.secret_directory:
        console.print("[yellow]ONVIF secret directory not set; onvif credential queries will fail[/yellow]")

    async def run() -> None:
        try:
            store = create_store_from_config(cfg.store)
        except ValueError as exc:
            console.print(f"[red]Store unavailable:[/red] {exc}")
            raise typer.Exit(1) from exc

        reconciler = ResourceReconciler(
            store,
            asset_prefix=cfg.naming.asset_prefix,
            digest_bytes=cfg.naming.digest_bytes,
        )
        engine = create_dispatch_engine(cfg, reconciler, CredentialResolver(cfg.onvif.secret_directory))
        gateway: DeviceGatewayServer | None = None
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        def _request_stop() -> None:
            loop.call_soon_threadsafe(stop_event.set)

        if os.name != "nt":
            signal.signal(signal.SIGINT, lambda *_: _request_stop())
            signal.signal(signal.SIGTERM, lambda *_: _request_stop())

        try:
            gateway = DeviceGatewayServer(
                host=cfg.server.host,
                port=cfg.server.port,
                engine=engine,
                loop=loop,
                max_request_body_bytes=cfg.server.max_body_bytes,
                request_timeout_seconds=cfg.server.request_timeout_seconds,
            )
            gateway.start()
            console.print(f"[green]✓[/green] protocols={','.join(engine.protocols)}")
            await stop_event.wait()
        except KeyboardInterrupt:
            pass
        finally:
            if gateway:
                gateway.stop()
            await store.close()
            logger.info("deviceservice gateway stopped")

    asyncio.run(run())


if __name__ == "__main__":
    app()
