"""Guest reclamation CLI.

Usage examples:
    flask reclaim-guests                          # threshold = cookie lifetime
    flask reclaim-guests --stale-after-minutes=60
    python -m guestkit.scripts.reclaim_guests --stale-after-minutes=1440
"""

from __future__ import annotations

import logging
import os
import sys

import click
from flask.cli import with_appcontext

logger = logging.getLogger(__name__)


@click.command("reclaim-guests")
@click.option(
    "--stale-after-minutes",
    type=click.IntRange(min=0),
    default=None,
    help="Delete guests not seen for this many minutes (default: cookie lifetime)",
)
@with_appcontext
def reclaim_guests_command(stale_after_minutes: int | None):
    """Delete guest identities that have been inactive past the threshold."""
    from guestkit.core.guests.services import guest_manager

    deleted = guest_manager.reclaim(stale_after_minutes)
    threshold = stale_after_minutes if stale_after_minutes is not None else guest_manager.config.cookie_minutes
    click.echo(f"reclaim ok: deleted={deleted} stale_after_minutes={threshold}")


def register_commands(app) -> None:
    app.cli.add_command(reclaim_guests_command)


def main(argv: list[str] | None = None) -> int:
    """Entry point for python -m guestkit.scripts.reclaim_guests."""
    from guestkit import create_app

    logging.basicConfig(level=os.environ.get("GUESTKIT_LOGLEVEL", "INFO"))
    app = create_app()
    with app.app_context():
        try:
            reclaim_guests_command.main(standalone_mode=False, args=argv)
        except click.ClickException as exc:
            exc.show()
            return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
