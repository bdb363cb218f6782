# --- cli.py ---
import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .model import ROLE_ADMIN
from .services import user_service
from .services.plan_service import seed_default_plans


@click.command("create-admin")
@with_appcontext
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
def create_admin(email, password, first_name, last_name):
    try:
        user = user_service.create_user({
            "email": email,
            "password": password,
            "firstName": first_name,
            "lastName": last_name,
            "role": ROLE_ADMIN,
        })
    except ApiError as e:
        raise click.ClickException(e.message)
    click.echo(f"Admin created: {user.id} {user.email}")


@click.command("seed-plans")
@with_appcontext
def seed_plans():
    created = seed_default_plans()
    click.echo(f"{created} plan(s) created")


@click.command("init-db")
@with_appcontext
def init_db():
    db.create_all()
    click.echo("Database tables created")


def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(seed_plans)
    app.cli.add_command(init_db)
