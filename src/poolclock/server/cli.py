"""``poolclock`` command line: run the server, run one tick, list schedules."""

from __future__ import annotations

import json
from typing import Optional

import typer
import uvicorn

from ..config import get_settings
from ..errors import ConfigurationInvalid
from ..logger import configure_logging, get_logger
from ..service import SchedulerService, build_service

app = typer.Typer(add_completion=False, help="PoolClock schedule controller.")


def _load_service() -> SchedulerService:
    """Build the service from current settings; bad configuration exits with code 2."""

    settings = get_settings()
    configure_logging(settings)
    try:
        return build_service(settings)
    except ConfigurationInvalid as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2) from exc


@app.callback()
def _root_callback() -> None:
    """PoolClock CLI command group."""


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Interface to bind. Defaults to POOLCLOCK_HOST."),
    port: Optional[int] = typer.Option(None, help="Port to bind. Defaults to POOLCLOCK_PORT."),
    reload: Optional[bool] = typer.Option(None, "--reload/--no-reload", help="Override the configured auto-reload."),
    log_level: Optional[str] = typer.Option(None, help="Uvicorn log level."),
) -> None:
    """Run the scheduling loop behind the status API."""

    settings = get_settings()
    configure_logging(settings)
    options = {
        "host": host or settings.host,
        "port": port or settings.port,
        "reload": settings.reload if reload is None else reload,
        "log_level": log_level or settings.log_level,
    }
    get_logger(__name__).info("Starting PoolClock server (%s)", ", ".join(f"{k}={v}" for k, v in options.items()))
    uvicorn.run("poolclock.server.app:create_application", factory=True, **options)


@app.command()
def tick() -> None:
    """Run one scheduling pass against the configured equipment and print the report as JSON."""

    service = _load_service()
    try:
        report = service.collection.run_tick()
    finally:
        service.stop()
    typer.echo(json.dumps(report.to_dict(), indent=2))
    if report.failures:
        raise typer.Exit(code=1)


@app.command()
def schedules() -> None:
    """List configured schedules and whether this controller owns them."""

    service = _load_service()
    for schedule in service.store:
        controlled = "controlled" if schedule.id in service.collection else "ignored"
        typer.echo(
            f"#{schedule.id:<3} circuit={schedule.circuit:<3} {schedule.schedule_type.value:<8} "
            f"{schedule.start_time_type.value}+{schedule.start_time} -> "
            f"{schedule.end_time_type.value}+{schedule.end_time} [{controlled}]"
        )
    service.stop()


def main() -> None:
    """Entrypoint for the ``poolclock`` console script."""

    app()
