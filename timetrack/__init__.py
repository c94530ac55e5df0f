"""Slack time tracking bot."""
