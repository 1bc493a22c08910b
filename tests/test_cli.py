"""
Tests for the tm command line.
"""

import pytest
from click.testing import CliRunner

from commands.log import log
from commands.page import page
from commands.status import status


@pytest.fixture
def runner(db_path):
    return CliRunner()


@pytest.fixture
def pages(runner):
    result = runner.invoke(page, ['add', 'Article A', '--id', '1', '--type', 'informative'])
    assert result.exit_code == 0, result.output
    result = runner.invoke(page, ['add', 'Article B', '--id', '2', '--link', 'المقال ب'])
    assert result.exit_code == 0, result.output


class TestPageCommands:

    def test_import_csv(self, runner, store, tmp_path):
        csv_file = tmp_path / 'pages.csv'
        csv_file.write_text(
            'page_id,title,article_type,translation\n'
            '10,First page,service,\n'
            '11,Second page,,الصفحة الثانية\n',
            encoding='utf-8'
        )

        result = runner.invoke(page, ['import', str(csv_file)])

        assert result.exit_code == 0, result.output
        assert 'Imported 2 page(s)' in result.output

        overview = runner.invoke(status, ['overview', '--status', 'translated'])
        assert 'Second page' in overview.output
        assert 'First page' not in overview.output


class TestStatusCommands:

    def test_edit_and_show(self, runner, pages):
        result = runner.invoke(status, ['edit', '1', '--status', 'review', '--suggested-name', 'Foo', '--wordcount', '0'])
        assert result.exit_code == 0, result.output

        shown = runner.invoke(status, ['show', '1'])
        assert shown.exit_code == 0
        assert 'Article A' in shown.output
        assert 'In review' in shown.output
        assert 'Foo' in shown.output

    def test_edit_keeps_fields_not_given(self, runner, store, pages):
        runner.invoke(status, ['edit', '1', '--translator', 'Dana', '--start-date', '2024-01-01'])
        runner.invoke(status, ['edit', '1', '--project', 'Housing'])

        stored = store.get(1)
        assert stored.translator == 'Dana'
        assert stored.project == 'Housing'
        assert str(stored.start_date) == '2024-01-01'

    def test_clear_field(self, runner, store, pages):
        runner.invoke(status, ['edit', '1', '--translator', 'Dana'])
        result = runner.invoke(status, ['edit', '1', '--clear', 'translator'])

        assert result.exit_code == 0
        assert store.get(1).translator is None

    def test_duplicate_suggestion_is_reported(self, runner, pages):
        runner.invoke(status, ['edit', '1', '--suggested-name', 'Foo'])
        result = runner.invoke(status, ['edit', '2', '--suggested-name', 'Foo'])

        assert result.exit_code == 1
        assert 'already suggested for Article A' in result.output

    def test_invalid_wordcount_is_reported(self, runner, pages):
        result = runner.invoke(status, ['edit', '1', '--wordcount=-1'])

        assert result.exit_code == 1
        assert 'wordcount' in result.output

    def test_show_unknown_article(self, runner, db_path):
        result = runner.invoke(status, ['show', '404'])
        assert result.exit_code == 1
        assert 'not found' in result.output

    def test_overview_filters(self, runner, pages):
        runner.invoke(status, ['edit', '1', '--status', 'review'])

        review = runner.invoke(status, ['overview', '--status', 'review'])
        assert review.exit_code == 0, review.output
        assert 'Article A' in review.output
        assert 'Article B' not in review.output
        assert 'of 1 article(s)' in review.output

        typed = runner.invoke(status, ['overview', '--type', 'informative', '--all-columns'])
        assert 'Article A' in typed.output
        assert 'Article type' in typed.output

    def test_overview_rejects_unsupported_limit(self, runner, db_path):
        result = runner.invoke(status, ['overview', '--limit', '50'])
        assert result.exit_code == 2

    def test_overview_negative_min_pageviews_lists_everything(self, runner, pages):
        result = runner.invoke(status, ['overview', '--min-pageviews=-5'])
        assert result.exit_code == 0, result.output
        assert 'Article A' in result.output
        assert 'Article B' in result.output

    def test_overview_empty(self, runner, db_path):
        result = runner.invoke(status, ['overview'])
        assert result.exit_code == 0
        assert 'No articles match' in result.output

    def test_import_pageviews(self, runner, store, pages, tmp_path):
        runner.invoke(status, ['edit', '1', '--translator', 'Dana'])
        csv_file = tmp_path / 'views.csv'
        csv_file.write_text('page_id,pageviews,main_category\n1,1500,Law\n2,20,\nx,5,\n', encoding='utf-8')

        result = runner.invoke(status, ['import-pageviews', str(csv_file)])

        assert result.exit_code == 1
        assert 'Updated 2 record(s)' in result.output
        assert 'Line 4' in result.output
        assert store.get(1).pageviews == 1500
        assert store.get(1).main_category == 'Law'
        assert store.get(1).translator == 'Dana'
        assert store.get(2).pageviews == 20


class TestLogCommands:

    def test_list_edits(self, runner, pages):
        runner.invoke(status, ['edit', '1', '--status', 'review'])
        runner.invoke(status, ['edit', '1', '--wordcount', 'many'])

        result = runner.invoke(log, ['list'])
        assert result.exit_code == 0
        assert 'Showing 2 most recent edit(s)' in result.output

        errors = runner.invoke(log, ['list', '--errors'])
        assert 'Showing 1 most recent edit(s)' in errors.output
