"""Tests for the /timer command workflow and its Slack rendering."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from timetrack.errors import InvalidState, StoreUnavailable
from timetrack.models import Member, Timer
from timetrack.slack import commands, theme
from timetrack.slack.commands import SlackCommand, handle_timer_command, normalize_command
from timetrack.tracking import reports

T0 = datetime(2024, 3, 12, 9, 0, 0)


def payload(text, **overrides):
    data = {
        "token": "gIkuvaNzQIHg97ATvDxqgjtO",
        "team_id": "T0001",
        "team_domain": "example",
        "channel_id": "C2147483705",
        "channel_name": "test",
        "user_id": "U2147483697",
        "user_name": "Steve",
        "command": "/timer",
        "text": text,
        "response_url": "https://hooks.slack.com/commands/1234/5678",
    }
    data.update(overrides)
    return data


def attachment_texts(response):
    return [a.get("text", "") for a in response["attachments"]]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("start Convert the logotype to PNG", ("start", "Convert the logotype to PNG")),
        ("  stop  ", ("stop", "")),
        ("status   week", ("status", "week")),
        ("", ("", "")),
    ],
)
def test_normalize_command(text, expected):
    assert normalize_command(text) == expected


def test_slack_command_from_payload():
    cmd = SlackCommand.from_payload(payload("start Convert the logotype to PNG"))
    assert cmd.team_id == "T0001"
    assert cmd.channel_id == "C2147483705"
    assert cmd.channel_name == "test"
    assert cmd.user_id == "U2147483697"
    assert cmd.user_name == "Steve"
    assert cmd.command == "/timer"
    assert cmd.sub_command == "start"
    assert cmd.text == "Convert the logotype to PNG"


def test_unknown_command(db):
    assert handle_timer_command(db, payload("foobar")) == {"text": "Unknown command: foobar!"}


def test_start_then_stop(db):
    started = handle_timer_command(db, payload("start build"), now=T0)
    authors = [a.get("author_name") for a in started["attachments"]]
    assert authors == ["Started:", None]
    assert "build" in started["attachments"][0]["text"]
    assert "<#C2147483705|test>" in started["attachments"][0]["footer"]
    assert "*Your total for today is 0:00*" in attachment_texts(started)

    stopped = handle_timer_command(db, payload("stop"), now=T0 + timedelta(minutes=95))
    assert stopped["attachments"][0]["author_name"] == "Completed:"
    assert "*1:35*" in stopped["attachments"][0]["text"]
    assert "*Your total for today is 1:35*" in attachment_texts(stopped)


def test_start_other_task_stops_the_running_one(db):
    handle_timer_command(db, payload("start build"), now=T0)
    response = handle_timer_command(db, payload("start docs"), now=T0 + timedelta(minutes=30))

    authors = [a.get("author_name") for a in response["attachments"]]
    assert authors == ["Completed:", "Started:", None]
    assert "build" in response["attachments"][0]["text"]
    assert "docs" in response["attachments"][1]["text"]
    assert "*Your total for today is 0:30*" in attachment_texts(response)

    running = db.execute(
        select(func.count()).select_from(Timer).where(Timer.finished_at.is_(None))
    ).scalar_one()
    assert running == 1


def test_start_same_task_keeps_timer(db):
    handle_timer_command(db, payload("start build"), now=T0)
    response = handle_timer_command(db, payload("start build"), now=T0 + timedelta(minutes=12))

    assert response["attachments"][0]["author_name"] == "Already running:"
    assert "*0:12*" in response["attachments"][0]["text"]
    assert db.execute(select(func.count()).select_from(Timer)).scalar_one() == 1


def test_stop_without_timer_is_a_user_error(db):
    response = handle_timer_command(db, payload("stop"), now=T0)
    assert response["attachments"][0]["color"] == theme.ERROR_COLOR
    assert response["attachments"][0]["text"] == "There is no running timer to stop"


def test_start_without_task_name(db):
    response = handle_timer_command(db, payload("start"), now=T0)
    assert response["attachments"][0]["color"] == theme.ERROR_COLOR


def test_status_with_no_tasks(db):
    response = handle_timer_command(db, payload("status"), now=T0)
    assert response["text"] == "You have no tasks completed today"
    assert response["attachments"] == []


def test_status_lists_completed_and_current(db):
    handle_timer_command(db, payload("start build"), now=T0)
    handle_timer_command(db, payload("start docs"), now=T0 + timedelta(minutes=45))
    handle_timer_command(
        db,
        payload("start review", channel_id="C-other", channel_name="other"),
        now=T0 + timedelta(minutes=55),
    )

    response = handle_timer_command(db, payload("status"), now=T0 + timedelta(minutes=70))
    assert response["text"] == "Your status for today"

    completed, current, summary = response["attachments"]
    assert completed["author_name"] == "Completed:"
    assert "*0:45*  build" in completed["text"]
    assert "*0:10*  docs" in completed["text"]
    assert current["author_name"] == "Current:"
    assert "*0:15*  review" in current["text"]
    assert "<#C-other|other>" in current["footer"]
    assert summary["text"] == "*Your total for today is 0:55*"


def test_status_marks_tasks_from_other_channels(db):
    handle_timer_command(db, payload("start review", channel_id="C-other", channel_name="other"), now=T0)
    handle_timer_command(db, payload("stop", channel_id="C-other"), now=T0 + timedelta(minutes=20))

    response = handle_timer_command(db, payload("status"), now=T0 + timedelta(minutes=30))
    assert "<#C-other|other>  review" in response["attachments"][0]["text"]


def test_status_for_unknown_period(db):
    response = handle_timer_command(db, payload("status fortnight"), now=T0)
    assert response["attachments"][0]["text"] == "Unknown period: fortnight"


def test_status_uses_the_configured_zone(db):
    # 23:30 UTC on the 11th is already the 12th in Tokyo
    handle_timer_command(db, payload("start build"), now=datetime(2024, 3, 11, 23, 30))
    handle_timer_command(db, payload("stop"), now=datetime(2024, 3, 11, 23, 50))

    utc = handle_timer_command(db, payload("status"), now=datetime(2024, 3, 12, 1, 0))
    tokyo = handle_timer_command(db, payload("status"), tz="Asia/Tokyo", now=datetime(2024, 3, 12, 1, 0))
    assert utc["text"] == "You have no tasks completed today"
    assert tokyo["attachments"][-1]["text"] == "*Your total for today is 0:20*"


def test_store_failures_are_rendered_generically(db, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StoreUnavailable("connection refused")

    monkeypatch.setattr(commands.reports, "resolve_scope", unavailable)
    response = handle_timer_command(db, payload("status"), now=T0)
    assert response["attachments"][0]["color"] == theme.ERROR_COLOR
    assert "connection refused" not in response["attachments"][0]["text"]


def test_stop_report_flags_concurrent_stop(db, session_factory, monkeypatch):
    scope = reports.resolve_scope(db, "T0001", "C1", "U1")
    reports.start(db, scope, "build", now=T0)
    stale = db.execute(select(Timer)).scalar_one()

    with session_factory() as other:
        other_scope = reports.resolve_scope(other, "T0001", "C1", "U1")
        reports.stop(other, other_scope, now=T0 + timedelta(minutes=5))

    # The duplicate request looked the timer up before the first one stopped it
    monkeypatch.setattr(reports, "find_active_timer", lambda session, member: stale)
    report = reports.stop(db, scope, now=T0 + timedelta(minutes=9))
    assert report.already_finished
    assert report.stopped_timer.minutes == 5
    assert report.member_total == 5


def test_reports_start_requires_name(db):
    scope = reports.resolve_scope(db, "T0001", "C1", "U1")
    with pytest.raises(InvalidState):
        reports.start(db, scope, "   ", now=T0)


@pytest.mark.parametrize("minutes, expected", [(0, "0:00"), (5, "0:05"), (60, "1:00"), (605, "10:05"), (-3, "0:00")])
def test_format_duration(minutes, expected):
    assert theme.format_duration(minutes) == expected


def test_losing_a_start_race_reads_as_a_plain_message(db, monkeypatch):
    handle_timer_command(db, payload("start build"), now=T0)
    member_id = db.execute(select(Member.id)).scalar_one()

    # The second request looked before the first one's timer existed
    monkeypatch.setattr(reports, "find_active_timer", lambda session, member: None)
    response = handle_timer_command(db, payload("start docs"), now=T0 + timedelta(minutes=1))

    [attachment] = response["attachments"]
    assert attachment["color"] == theme.ERROR_COLOR
    assert attachment["text"] == "You already have a running timer"
    assert member_id not in attachment["text"]


def test_stopping_a_deleted_timer_reads_as_a_plain_message(db, monkeypatch):
    handle_timer_command(db, payload("start build"), now=T0)
    timer = db.execute(select(Timer)).scalar_one()
    timer.soft_delete(T0 + timedelta(minutes=1))
    db.commit()

    monkeypatch.setattr(reports, "find_active_timer", lambda session, member: timer)
    response = handle_timer_command(db, payload("stop"), now=T0 + timedelta(minutes=2))

    assert attachment_texts(response) == ["That timer was deleted"]
    assert timer.id not in response["attachments"][0]["text"]
