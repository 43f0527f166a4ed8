import click

from petsched import db


def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        from petsched import models  # noqa: F401
        db.create_all()
        click.echo('Database initialized.')

    @app.cli.command('seed')
    @click.option('--admin-email', default='admin@petsched.local', show_default=True)
    @click.option('--admin-password', default='admin123', show_default=True)
    def seed(admin_email, admin_password):
        """Load the demo clinic, an admin user and sample pets and appointments."""
        from petsched import models  # noqa: F401
        from petsched.seed import seed_database
        from petsched.services import get_services

        db.create_all()
        result = seed_database(get_services().database, admin_email, admin_password)
        click.echo(f"Seeded {result['pets']} pets and {result['appointments']} appointments.")
        click.echo(f"Admin login: {admin_email} / {admin_password}")
