from datetime import timezone

import click

from bizflow.services.subscriptions import expire_lapsed_subscriptions
from bizflow.utils import utcnow

NOW_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S%z",
]


def _as_naive_utc(value):
    # columns hold naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def register_commands(app):
    @app.cli.command("expire-subscriptions")
    @click.option(
        "--now",
        type=click.DateTime(formats=NOW_FORMATS),
        default=None,
        help="Timestamp to expire against, UTC unless an offset is given (defaults to now).",
    )
    def expire_subscriptions(now):
        """Expire Active/Trial subscriptions whose end date has passed."""
        now = _as_naive_utc(now) if now else utcnow()
        count = expire_lapsed_subscriptions(now)
        click.echo(f"Expired {count} subscription(s).")
