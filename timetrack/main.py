"""Main entry point for the timetrack bot."""

from timetrack.slack import start_bot


def main():
    """Start the timetrack bot."""
    start_bot()


if __name__ == "__main__":
    main()
