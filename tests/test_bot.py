"""Tests for the Slack app wiring."""

import pytest

from timetrack.config import Settings
from timetrack.slack import bot
from timetrack.slack.commands import GENERIC_ERROR


class FakeApp:
    def __init__(self, **kwargs):
        self.options = kwargs
        self.commands = {}

    def command(self, name):
        def register(func):
            self.commands[name] = func
            return func
        return register


class RecordingAck:
    def __init__(self):
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)


def command_payload(text):
    return {
        "team_id": "T0001",
        "channel_id": "C2147483705",
        "channel_name": "test",
        "user_id": "U2147483697",
        "user_name": "Steve",
        "command": "/timer",
        "text": text,
    }


@pytest.fixture
def timer_command(session_factory, monkeypatch):
    monkeypatch.setattr(bot, "App", FakeApp)
    app = bot.create_app(session_factory, Settings(report_timezone="UTC"))
    return app.commands["/timer"]


def test_command_is_acked_with_the_response(timer_command):
    ack = RecordingAck()
    timer_command(ack=ack, command=command_payload("foobar"))

    assert ack.calls == [{"text": "Unknown command: foobar!", "attachments": None}]


def test_command_is_acked_when_the_handler_crashes(timer_command, monkeypatch):
    def crash(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(bot, "handle_timer_command", crash)
    ack = RecordingAck()

    with pytest.raises(RuntimeError):
        timer_command(ack=ack, command=command_payload("status"))

    [call] = ack.calls
    assert call["attachments"][0]["text"] == GENERIC_ERROR
    assert "boom" not in call["attachments"][0]["text"]
