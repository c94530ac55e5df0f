"""The ``/timer`` slash command: parse the payload, run the workflow, render it."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from rich.console import Console
from sqlalchemy.orm import Session

from timetrack.errors import InvalidState, TimetrackError
from timetrack.slack import theme
from timetrack.tracking import reports

console = Console()

SUBCOMMANDS = ("start", "stop", "status")
GENERIC_ERROR = "Something went wrong while handling your command. Please try again."


@dataclass
class SlackCommand:
    """A slash command payload with the subcommand split off the text."""
    team_id: str
    channel_id: str
    user_id: str
    command: str = ""
    sub_command: str = ""
    text: str = ""
    team_domain: str = ""
    channel_name: str = ""
    user_name: str = ""
    response_url: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> "SlackCommand":
        sub_command, text = normalize_command(payload.get("text", ""))
        return cls(
            team_id=payload.get("team_id", ""),
            channel_id=payload.get("channel_id", ""),
            user_id=payload.get("user_id", ""),
            command=payload.get("command", ""),
            sub_command=sub_command,
            text=text,
            team_domain=payload.get("team_domain", ""),
            channel_name=payload.get("channel_name", ""),
            user_name=payload.get("user_name", ""),
            response_url=payload.get("response_url", ""),
        )


def normalize_command(text: str) -> tuple[str, str]:
    """Split ``"start Add logo"`` into ``("start", "Add logo")``."""
    text = (text or "").strip()
    sub, _, rest = text.partition(" ")
    return sub.strip(), rest.strip()


def handle_timer_command(
    db: Session,
    payload: dict,
    tz: Union[str, ZoneInfo] = "UTC",
    now: Optional[datetime] = None,
) -> dict:
    """Run one ``/timer`` invocation and return the Slack response payload."""
    cmd = SlackCommand.from_payload(payload)
    sub = cmd.sub_command.lower()

    if sub not in SUBCOMMANDS:
        return {"text": f"Unknown command: {cmd.sub_command}!"}

    console.print(f"[blue]/timer {sub} from {cmd.user_id} in {cmd.team_id}/{cmd.channel_id}[/blue]")

    try:
        scope = reports.resolve_scope(
            db,
            cmd.team_id,
            cmd.channel_id,
            cmd.user_id,
            channel_name=cmd.channel_name or None,
            user_name=cmd.user_name or None,
        )
        if sub == "start":
            return theme.format_start(reports.start(db, scope, cmd.text, tz=tz, now=now))
        if sub == "stop":
            report = reports.stop(db, scope, tz=tz, now=now)
            if report.already_finished:
                console.print(f"[yellow]Timer {report.stopped_timer.id[:8]} was already stopped by another request[/yellow]")
            return theme.format_stop(report)
        return theme.format_status(reports.status(db, scope, cmd.text or "today", tz=tz, now=now))

    except InvalidState as e:
        message = str(e)
        return theme.format_error(message[:1].upper() + message[1:])
    except TimetrackError as e:
        console.print(f"[red]/timer {sub} failed:[/red] {type(e).__name__}: {e}")
        return theme.format_error(GENERIC_ERROR)
