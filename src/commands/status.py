"""
Translation status commands.
"""

import csv
import click
from tabulate import tabulate
from db import Database, StatusCode
from db.status_store import StatusRecordStore
from domain.errors import DuplicateSuggestionError, FieldValidationError, PersistenceError
from domain.filters import FilterCriteria, STATUS_FILTER_CHOICES
from domain.overview import PAGE_LIMITS, DEFAULT_LIMIT, DEFAULT_SORT, SORT_COLUMNS, fetch_overview
from domain.records import EDITABLE_FIELDS
from domain.status import STATUS_LABELS, OVERVIEW_FIELDS
from domain.status_editor import StatusEditWorkflow, DATE_FORMAT

# Overview columns shown in the terminal (the full set is OVERVIEW_FIELDS)
TABLE_COLUMNS = ('page_title', 'status', 'suggested_name', 'translator', 'pageviews', 'actual_translation')


def _format_value(field, value):
    if value is None:
        return ''
    if field == 'status':
        return STATUS_LABELS.get(value, value)
    if field in ('start_date', 'end_date'):
        return value.strftime(DATE_FORMAT)
    if field in ('pageviews', 'wordcount'):
        return f"{value:,}"
    return value


def _report_error(error):
    """Print a workflow error the way editors should see it."""
    if isinstance(error, FieldValidationError):
        click.echo(click.style(f"✗ Invalid value for {error}", fg="red"))
    elif isinstance(error, DuplicateSuggestionError):
        holder = error.conflicting_title or f"page #{error.conflicting_article_id}"
        click.echo(click.style(
            f"✗ The suggested name '{error.suggested_name}' is already suggested for {holder} "
            f"(ID: {error.conflicting_article_id})", fg="red"))
    elif isinstance(error, PersistenceError):
        click.echo(click.style(f"✗ Could not save: {error}", fg="red"))
    else:
        click.echo(click.style(f"✗ {error}", fg="red"))


@click.group()
def status():
    """View and edit article translation status."""
    pass


@status.command()
@click.argument('article_id', type=int)
def show(article_id):
    """
    Show the translation status of one article.

    Example:
        tm status show 42
    """
    workflow = StatusEditWorkflow(Database())
    try:
        view = workflow.load_edit_view(article_id)
    except PersistenceError as e:
        _report_error(e)
        raise SystemExit(1)

    if view is None:
        click.echo(click.style(f"Article {article_id} not found.", fg="red"))
        raise SystemExit(1)

    record = view.record
    status_label = STATUS_LABELS[view.effective_status]
    if view.status_locked:
        status_label += click.style(' (locked)', fg='yellow')

    info_table = [
        ['Title', click.style(view.title, bold=True)],
        ['Translation', view.actual_translation or click.style('(none)', fg='yellow')],
        ['Status', status_label],
        ['Suggested name', record.suggested_name or ''],
        ['Translator', record.translator or ''],
        ['Project', record.project or ''],
        ['Start date', _format_value('start_date', record.start_date)],
        ['End date', _format_value('end_date', record.end_date)],
        ['Words', _format_value('wordcount', record.wordcount)],
        ['Page views', _format_value('pageviews', record.pageviews)],
        ['Main category', record.main_category or ''],
        ['Comments', record.comments or ''],
    ]
    click.echo()
    click.echo(tabulate(info_table, tablefmt='plain'))
    click.echo()


@status.command()
@click.argument('article_id', type=int)
@click.option('--status', 'new_status', type=click.Choice(StatusCode.values()), help='Translation status')
@click.option('--suggested-name', help='Suggested target-language title')
@click.option('--translator', help='Translator name')
@click.option('--project', help='Project name')
@click.option('--comments', help='Free-text comments')
@click.option('--wordcount', help='Word count (whole number)')
@click.option('--start-date', help='Start date (YYYY-MM-DD)')
@click.option('--end-date', help='End date (YYYY-MM-DD)')
@click.option('--clear', multiple=True, type=click.Choice(EDITABLE_FIELDS), help='Empty a field (repeatable)')
def edit(article_id, new_status, suggested_name, translator, project, comments, wordcount, start_date, end_date, clear):
    """
    Edit the translation status of one article.

    Fields that are not given keep their current value.

    Example:
        tm status edit 42 --status review --suggested-name "حقوق المستأجرين"
        tm status edit 42 --wordcount 1200 --start-date 2024-05-01
        tm status edit 42 --clear translator --clear end_date
    """
    db = Database()
    workflow = StatusEditWorkflow(db)

    try:
        current = workflow.store.get_or_default(article_id)
    except PersistenceError as e:
        _report_error(e)
        raise SystemExit(1)

    # Start from the stored values, like a pre-filled form
    fields = {}
    for name in EDITABLE_FIELDS:
        value = getattr(current, name)
        if name == 'status' and value is not None:
            value = value.value
        elif name in ('start_date', 'end_date') and value is not None:
            value = value.strftime(DATE_FORMAT)
        fields[name] = value

    submitted = {
        'status': new_status,
        'suggested_name': suggested_name,
        'translator': translator,
        'project': project,
        'comments': comments,
        'wordcount': wordcount,
        'start_date': start_date,
        'end_date': end_date,
    }
    fields.update({name: value for name, value in submitted.items() if value is not None})
    for name in clear:
        fields[name] = None

    result = workflow.apply_edit(article_id, fields)
    if not result.ok:
        _report_error(result.error)
        raise SystemExit(1)

    click.echo(click.style(f"✓ Status of article {article_id} saved", fg="green"))


@status.command()
@click.option('--status', 'status_filter', type=click.Choice(STATUS_FILTER_CHOICES), default='all', help='Status filter (default: all)')
@click.option('--title', 'page_title', default=None, help='Title contains (case-insensitive)')
@click.option('--min-pageviews', type=int, default=0, help='Minimum page views (0 or less: no minimum)')
@click.option('--start-from', 'start_date_from', type=click.DateTime([DATE_FORMAT]), help='Start date on or after')
@click.option('--start-to', 'start_date_to', type=click.DateTime([DATE_FORMAT]), help='Start date on or before')
@click.option('--end-from', 'end_date_from', type=click.DateTime([DATE_FORMAT]), help='End date on or after')
@click.option('--end-to', 'end_date_to', type=click.DateTime([DATE_FORMAT]), help='End date on or before')
@click.option('--type', 'article_type', default=None, help='Article type')
@click.option('--translator', default=None, help='Translator')
@click.option('--project', default=None, help='Project')
@click.option('--category', 'main_category', default=None, help='Main category')
@click.option('--sort', type=click.Choice(list(SORT_COLUMNS)), default=DEFAULT_SORT, help=f'Sort column (default: {DEFAULT_SORT})')
@click.option('--desc', 'descending', is_flag=True, default=False, help='Sort descending')
@click.option('--limit', '-l', type=click.Choice([str(n) for n in PAGE_LIMITS]), default=str(DEFAULT_LIMIT), help=f'Rows per page (default: {DEFAULT_LIMIT})')
@click.option('--offset', type=click.IntRange(min=0), default=0, help='Rows to skip')
@click.option('--all-columns', is_flag=True, default=False, help='Show every overview column')
@click.option('--no-pager', is_flag=True, help='Disable pager for output')
def overview(status_filter, page_title, min_pageviews, start_date_from, start_date_to, end_date_from, end_date_to,
             article_type, translator, project, main_category, sort, descending, limit, offset, all_columns, no_pager):
    """
    List articles with their translation status.

    Example:
        tm status overview --status untranslated --min-pageviews 1000 --sort pageviews --desc
        tm status overview --status translated --translator "Jane Doe"
    """
    criteria = FilterCriteria(
        status_filter=status_filter,
        page_title=page_title,
        min_pageviews=min_pageviews,
        start_date_from=start_date_from.date() if start_date_from else None,
        start_date_to=start_date_to.date() if start_date_to else None,
        end_date_from=end_date_from.date() if end_date_from else None,
        end_date_to=end_date_to.date() if end_date_to else None,
        article_type=article_type,
        translator=translator,
        project=project,
        main_category=main_category,
    )

    db = Database()
    session = db.get_session()
    try:
        result = fetch_overview(session, criteria, sort=sort, descending=descending, limit=int(limit), offset=offset)
    finally:
        session.close()

    if not result.rows:
        click.echo(click.style("No articles match these filters.", fg="yellow"))
        return

    columns = tuple(OVERVIEW_FIELDS) if all_columns else TABLE_COLUMNS
    table_data = []
    for row in result.rows:
        values = {name: getattr(row, name, None) for name in OVERVIEW_FIELDS}
        values['page_title'] = row.display_title
        table_data.append([_format_value(name, values[name]) for name in columns])

    output = tabulate(table_data, headers=[OVERVIEW_FIELDS[name] for name in columns], tablefmt='simple')
    footer = f"Showing {offset + 1}-{offset + len(result.rows)} of {result.total} article(s)"

    if len(table_data) > 20 and not no_pager:
        click.echo_via_pager(output + '\n\n' + footer + '\n')
    else:
        click.echo()
        click.echo(output)
        click.echo()
        click.echo(click.style(footer, fg='cyan'))


@status.command(name='import-pageviews')
@click.argument('csv_file', type=click.File('r', encoding='utf-8'))
def import_pageviews(csv_file):
    """
    Import page views (and optionally main category) from CSV.

    Columns: page_id, pageviews, and optionally main_category. Editor
    fields of existing records are left untouched.

    Example:
        tm status import-pageviews pageviews.csv
    """
    store = StatusRecordStore(Database())

    updated = 0
    failed = 0
    for line_no, row in enumerate(csv.DictReader(csv_file), start=2):
        try:
            page_id = int(row['page_id'])
            pageviews = int(row['pageviews']) if row.get('pageviews') else None
        except (KeyError, TypeError, ValueError):
            click.echo(click.style(f"✗ Line {line_no}: page_id and pageviews must be whole numbers", fg="red"))
            failed += 1
            continue
        if pageviews is not None and pageviews < 0:
            click.echo(click.style(f"✗ Line {line_no}: pageviews cannot be negative", fg="red"))
            failed += 1
            continue

        result = store.set_external_fields(page_id, pageviews=pageviews, main_category=row.get('main_category'))
        if result.ok:
            updated += 1
        else:
            click.echo(click.style(f"✗ Line {line_no}: {result.error}", fg="red"))
            failed += 1

    click.echo(click.style(f"✓ Updated {updated} record(s)", fg="green"))
    if failed:
        click.echo(click.style(f"✗ {failed} line(s) skipped", fg="red"))
        raise SystemExit(1)
