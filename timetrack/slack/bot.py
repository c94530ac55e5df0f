"""Slack bot initialization and startup."""

from slack_bolt import Ack, App
from slack_bolt.adapter.socket_mode import SocketModeHandler
from sqlalchemy.orm import sessionmaker
from rich.console import Console

from timetrack.config import Settings, settings
from timetrack.models import create_store_engine, init_db, make_session_factory, session_scope
from timetrack.slack import theme
from timetrack.slack.commands import GENERIC_ERROR, handle_timer_command
from timetrack.tracking.periods import get_zone

console = Console()


def create_app(session_factory: sessionmaker, config: Settings = settings) -> App:
    """Create the Slack app and register the ``/timer`` command."""
    app = App(
        token=config.slack_bot_token,
        signing_secret=config.slack_signing_secret,
    )
    zone = get_zone(config.report_timezone)

    @app.command("/timer")
    def timer_command(ack: Ack, command: dict):
        response = theme.format_error(GENERIC_ERROR)
        try:
            with session_scope(session_factory) as db:
                response = handle_timer_command(db, command, tz=zone)
        finally:
            # Slack needs an ack even when the handler blows up
            ack(text=response.get("text", ""), attachments=response.get("attachments"))

    return app


def start_bot(config: Settings = settings):
    """Start the bot in socket mode."""
    console.print("[bold green]🚀 Starting timetrack bot...[/bold green]")

    engine = create_store_engine(
        config.database_url,
        timeout_seconds=config.db_timeout_seconds,
        echo=config.db_echo,
    )
    try:
        init_db(engine)
        console.print("[green]✓[/green] Database initialized")

        app = create_app(make_session_factory(engine), config)
        console.print("[green]✓[/green] Slack handlers registered")

        handler = SocketModeHandler(app, config.slack_app_token)
        console.print("[bold green]✓ Bot is running! Press Ctrl+C to stop.[/bold green]")
        handler.start()
    finally:
        engine.dispose()
        console.print("[green]✓[/green] Database connections closed")
