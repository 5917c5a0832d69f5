"""
Flask CLI commands.

  flask counters check [--fix]   – compare cached post counters with live counts
  flask users promote <user_id>  – give a user the admin role
  flask seed                     – load demo data into an empty database
"""
import click
from flask.cli import with_appcontext

from campusconnect.utils import counters


@click.group("counters")
def counters_cli():
    """Denormalized counter maintenance."""


@counters_cli.command("check")
@click.option("--fix", is_flag=True, help="Rewrite drifted counters from the live counts.")
@with_appcontext
def check_counters(fix):
    drift = counters.reconcile_counters() if fix else counters.find_counter_drift()
    if not drift:
        click.echo("All post counters match.")
        return
    for d in drift:
        click.echo(
            f"post {d.post_id}: likes {d.likes_count} (live {d.live_likes}), "
            f"comments {d.comments_count} (live {d.live_comments})"
        )
    if fix:
        click.echo(f"Reconciled {len(drift)} post(s).")
    else:
        raise click.ClickException(f"{len(drift)} post(s) have drifted counters; rerun with --fix")


@click.group("users")
def users_cli():
    """User administration."""


@users_cli.command("promote")
@click.argument("user_id")
@with_appcontext
def promote(user_id):
    from campusconnect.errors import NotFoundError
    from campusconnect.utils.profile_service import upsert_profile
    try:
        upsert_profile(user_id, {"role": "admin"})
    except NotFoundError:
        raise click.ClickException(f"No user with id {user_id!r}") from None
    click.echo(f"{user_id} is now an admin.")


@click.command("seed")
@with_appcontext
def seed():
    from campusconnect import seed_demo_data
    if seed_demo_data():
        click.echo("Demo data loaded.")
    else:
        click.echo("Database already has users; nothing seeded.")


def register_cli(app) -> None:
    app.cli.add_command(counters_cli)
    app.cli.add_command(users_cli)
    app.cli.add_command(seed)
