# confidential_vote/commands.py

import click

from confidential_vote import app, db
from confidential_vote.security.token_manager import TokenManager


@app.cli.command('init-db')
def init_db():
    """Create the fee ledger tables."""
    db.create_all()
    click.echo("Database initialized.")


@app.cli.command('issue-token')
@click.argument('principal')
@click.option('--expires-in', default=3600, show_default=True, help='Token lifetime in seconds.')
def issue_token(principal, expires_in):
    """Issue an API bearer token for PRINCIPAL."""
    try:
        token = TokenManager(app).generate_token(principal, expires_in=expires_in)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='PRINCIPAL')
    click.echo(token)
