"""
BeProductive command line interface
"""

import logging
import sys
from typing import Optional

import httpx
import typer

from app.core.logging import configure_logging

cli = typer.Typer(help="BeProductive API and focus timer tools")
logger = logging.getLogger("app.cli")


def _fmt(seconds: int) -> str:
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


@cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Server host address"),
    port: int = typer.Option(8000, help="Server port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


@cli.command("init-db")
def init_db():
    """Create all tables"""
    from app.db.base import Base, import_models
    from app.db.session import engine

    configure_logging(stream=sys.stderr)
    import_models()
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


@cli.command("backfill-sessions")
def backfill_sessions(
    dry_run: bool = typer.Option(False, help="Report without writing"),
):
    """Create focus sessions for pomodoros counted before sessions were stored"""
    from app.core.backfill import backfill_focus_sessions
    from app.db.base import import_models
    from app.db.session import SessionLocal

    configure_logging(stream=sys.stderr)
    import_models()
    with SessionLocal() as db:
        created = backfill_focus_sessions(db, dry_run=dry_run)
    typer.echo(f"{'Would create' if dry_run else 'Created'} {created} session(s)")


@cli.command()
def focus(
    task_id: str = typer.Argument(..., help="Task to work on"),
    intervals: int = typer.Option(1, min=1, help="Intervals to run before exiting"),
    state_file: Optional[str] = typer.Option(None, help="Timer state file"),
):
    """Run the focus timer in the terminal"""
    from app.timer.config import ClientSettings
    from app.timer.controller import FocusTimer
    from app.timer.driver import TimerDriver
    from app.timer.reporter import ApiProgressReporter, fetch_task, make_client
    from app.timer.storage import TimerStateFile

    configure_logging("WARNING", stream=sys.stderr)
    settings = ClientSettings()
    store = TimerStateFile(state_file or settings.STATE_FILE)

    with make_client(settings) as client:
        timer = FocusTimer(reporter=ApiProgressReporter(client), state=store.load())

        task = timer.state.active_task
        if task is None or task.id != task_id:
            try:
                timer.set_active_task(fetch_task(client, task_id))
            except httpx.HTTPError as e:
                typer.echo(f"Could not load task {task_id}: {e}", err=True)
                raise typer.Exit(1)

        def show(state):
            typer.echo(f"\r{state.mode.value:<12} {_fmt(state.time_left)}", nl=False)
            store.save(state)

        driver = TimerDriver(timer, interval=settings.TICK_SECONDS, on_tick=show)
        try:
            for _ in range(intervals):
                timer.start()
                driver.run()
                typer.echo("")
        except KeyboardInterrupt:
            timer.pause()
            typer.echo("\npaused")
        finally:
            store.save(timer.state)

    state = timer.state
    if state.active_task is not None:
        t = state.active_task
        typer.echo(f"{t.title}: {t.pomodoros_completed}/{t.pomodoros_total} ({t.status})")


def main():
    cli()


if __name__ == "__main__":
    main()
