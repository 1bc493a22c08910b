"""
Article metadata commands.

The host wiki owns this data; these commands load a local copy of it.
"""

import csv
import click
from db import Database
from settings import get_setting


@click.group()
def page():
    """Manage the local copy of article metadata."""
    pass


@page.command()
@click.argument('title')
@click.option('--id', 'page_id', type=int, required=True, help='Page ID in the wiki')
@click.option('--namespace', type=int, default=0, help='Namespace (default: 0, main)')
@click.option('--redirect', is_flag=True, default=False, help='Page is a redirect')
@click.option('--type', 'article_type', default=None, help='ArticleType page property')
@click.option('--link', default=None, help='Title of the target-language counterpart')
def add(title, page_id, namespace, redirect, article_type, link):
    """
    Add or update one article.

    Example:
        tm page add "Rights of tenants" --id 42 --type informative
        tm page add "Rights of tenants" --id 42 --link "حقوق المستأجرين"
    """
    db = Database()
    session = db.get_session()
    lang = get_setting('TARGET_LANGUAGE', 'ar')

    try:
        saved = db.save_page(session, page_id, title, namespace=namespace, is_redirect=redirect)
        if article_type is not None:
            db.set_article_type(session, page_id, article_type)
        if link is not None:
            db.set_langlink(session, page_id, lang, link)
        session.commit()
        click.echo(click.style(f"✓ Saved page {saved.page_id}: {saved.display_title}", fg="green"))
    except Exception as e:
        session.rollback()
        click.echo(click.style(f"✗ Database error: {e}", fg="red"))
        raise SystemExit(1)
    finally:
        session.close()


@page.command(name='import')
@click.argument('csv_file', type=click.File('r', encoding='utf-8'))
def import_pages(csv_file):
    """
    Bulk import articles from CSV.

    Columns: page_id, title, and optionally namespace, is_redirect,
    article_type, translation (target-language title).

    Example:
        tm page import pages.csv
    """
    db = Database()
    session = db.get_session()
    lang = get_setting('TARGET_LANGUAGE', 'ar')

    imported = 0
    try:
        for line_no, row in enumerate(csv.DictReader(csv_file), start=2):
            try:
                page_id = int(row['page_id'])
                title = row['title']
            except (KeyError, TypeError, ValueError):
                click.echo(click.style(f"✗ Line {line_no}: page_id and title are required", fg="red"))
                continue

            db.save_page(
                session,
                page_id,
                title,
                namespace=int(row.get('namespace') or 0),
                is_redirect=(row.get('is_redirect') or '0').lower() in ('1', 'true', 'yes')
            )
            if 'article_type' in row:
                db.set_article_type(session, page_id, row['article_type'])
            if 'translation' in row:
                db.set_langlink(session, page_id, lang, row['translation'])
            imported += 1

        session.commit()
        click.echo(click.style(f"✓ Imported {imported} page(s)", fg="green"))
    except Exception as e:
        session.rollback()
        click.echo(click.style(f"✗ Import failed, nothing saved: {e}", fg="red"))
        raise SystemExit(1)
    finally:
        session.close()
