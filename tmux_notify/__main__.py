"""Entry point for ``python -m tmux_notify``."""

from tmux_notify.cli.commands import app

if __name__ == "__main__":
    app()
