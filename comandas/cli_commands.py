"""
Flask CLI commands.

Commands:
- flask init-db: Create database tables
- flask create-admin: Create the first admin user
"""

import click
from sqlalchemy import func
from comandas.database import get_session, create_tables
from comandas.models import User, UserRole


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table that does not exist yet."""
        create_tables()
        click.echo(click.style('✅ Tablas creadas.', fg='green'))

    @app.cli.command('create-admin')
    @click.option('--username', prompt=True, help='Admin username')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    def create_admin(username, password):
        """Create an admin user for the restaurant staff panel."""
        username = username.strip()

        if not username:
            click.echo(click.style('❌ El nombre de usuario es requerido.', fg='red'))
            return

        if len(password) < 6:
            click.echo(click.style('❌ La contraseña debe tener al menos 6 caracteres.', fg='red'))
            return

        session = get_session()

        existing = session.query(User).filter(
            func.lower(User.username) == username.lower()
        ).first()
        if existing:
            click.echo(click.style(f'❌ Ya existe un usuario con el nombre: {username}', fg='red'))
            return

        try:
            admin = User(username=username, role=UserRole.ADMIN.value)
            admin.set_password(password)

            session.add(admin)
            session.commit()

            click.echo(click.style('\n✅ Administrador creado exitosamente!', fg='green', bold=True))
            click.echo(f'   Usuario: {username}')
            click.echo(f'   ID: {admin.id}')

        except Exception as e:
            session.rollback()
            click.echo(click.style(f'❌ Error al crear administrador: {str(e)}', fg='red'))
