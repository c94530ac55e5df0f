"""Slack integration."""


def start_bot():
    """Start the bot; imported lazily so the command handlers load without a Slack token."""
    from timetrack.slack.bot import start_bot as _start_bot

    _start_bot()
