"""Allow ``python -m flowscribe``."""

from flowscribe.cli import app

app()
