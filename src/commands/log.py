"""
CLI commands for the status edit log.
"""

import click
from tabulate import tabulate
from sqlalchemy import desc
from db import Database
from db.models import StatusEditLog


@click.group()
def log():
    """Inspect the status edit log."""
    pass


@log.command(name='list')
@click.option('--limit', default=20, help='Number of recent edits to show (default: 20)')
@click.option('--article', 'article_id', type=int, help='Filter by article ID')
@click.option('--success/--errors', default=None, help='Filter by saved/failed edits')
def list_edits(limit, article_id, success):
    """List recent status edits."""
    db = Database()
    session = db.get_session()

    try:
        query = session.query(StatusEditLog).order_by(desc(StatusEditLog.started_at), desc(StatusEditLog.id))

        if article_id is not None:
            query = query.filter(StatusEditLog.page_id == article_id)
        if success is not None:
            query = query.filter(StatusEditLog.success == (1 if success else 0))

        entries = query.limit(limit).all()

        if not entries:
            click.echo(click.style("No edits found.", fg='yellow'))
            return

        table_data = []
        for entry in entries:
            mark = click.style('✓', fg='green') if entry.success else click.style('✗', fg='red')
            fields = ', '.join(f"{k}={v}" for k, v in (entry.submitted_fields or {}).items() if v is not None)
            table_data.append([
                entry.id,
                mark,
                entry.page_id,
                fields[:60],
                entry.error_message or '',
                entry.started_at.strftime('%Y-%m-%d %H:%M:%S')
            ])

        click.echo()
        click.echo(tabulate(
            table_data,
            headers=['ID', '✓', 'Article', 'Fields', 'Error', 'Started'],
            tablefmt='simple'
        ))
        click.echo()
        click.echo(click.style(f"Showing {len(entries)} most recent edit(s)", fg='cyan'))
        click.echo()

    finally:
        session.close()
