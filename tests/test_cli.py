"""
CLI and interactive menu tests for the tech talk portal.
"""
import logging
import pytest
import tempfile
import shutil
from datetime import date
from pathlib import Path
import sqlite3
import click
from click.testing import CliRunner

import techtalk.cli
from techtalk.catalog import CatalogManager
from techtalk.cli import cli, resolve_log_level
from techtalk.menu import run_menu
from techtalk.record_store import RecordStore, TalkRecord


@pytest.fixture
def db_path():
    """Path to a throwaway database."""
    temp_dir = tempfile.mkdtemp()
    yield str(Path(temp_dir) / ".techtalk" / "techtalk.db")
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


def menu(runner, db_path, *lines):
    """Run the interactive menu with the given input lines."""
    return runner.invoke(cli, ["--db", db_path], input="\n".join(lines) + "\n")


ADD_RUST = ["1", "Intro to Rust", "Basics", "Alice", "rust, , systems"]


class TestMenu:
    """Interactive menu sessions."""

    def test_startup_and_exit(self, runner, db_path):
        result = menu(runner, db_path, "9")

        assert result.exit_code == 0
        assert "Connected to database successfully!" in result.output
        assert "Loaded 0 tech talks into memory." in result.output
        assert "INTERNAL TECH TALK PORTAL" in result.output
        assert "Exiting portal..." in result.output

    def test_end_of_input_exits(self, runner, db_path):
        result = runner.invoke(cli, ["--db", db_path], input="")

        assert result.exit_code == 0
        assert "Exiting portal..." in result.output

    def test_non_numeric_choice(self, runner, db_path):
        result = menu(runner, db_path, "abc", "9")

        assert result.exit_code == 0
        assert "Invalid input. Enter number 1-9." in result.output
        assert result.output.count("INTERNAL TECH TALK PORTAL") == 2

    def test_out_of_range_choice(self, runner, db_path):
        result = menu(runner, db_path, "42", "0", "9")

        assert result.exit_code == 0
        assert result.output.count("Invalid choice!") == 2

    def test_add_and_view(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "2", "9")

        assert result.exit_code == 0
        assert "Tech Talk added successfully!" in result.output
        assert "All Tech Talks:" in result.output
        assert "Posted By: Alice" in result.output
        assert "Tags: rust, systems" in result.output
        assert f"Date: {date.today().isoformat()}" in result.output

    def test_view_empty(self, runner, db_path):
        result = menu(runner, db_path, "2", "9")

        assert "No tech talks available!" in result.output

    def test_add_blank_title(self, runner, db_path):
        result = menu(runner, db_path, "1", "", "2", "9")

        assert result.exit_code == 0
        assert "Title required!" in result.output
        assert "No tech talks available!" in result.output

    def test_add_duplicate_title(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "1", "INTRO TO RUST", "9")

        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_search_by_title(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "3", "intro to rust", "3", "Missing", "9")

        assert "Description: Basics" in result.output
        assert "Not found in portal." in result.output

    def test_search_by_tag(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "4", "SYSTEMS", "4", "java", "9")

        assert "Posted By: Alice" in result.output
        assert "No talks found with this tag." in result.output

    def test_search_by_posted_by(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "5", "alice", "5", "Bob", "9")

        assert "Description: Basics" in result.output
        assert "No talks found by this author." in result.output

    def test_update(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "6", "Intro to Rust", "", "Alicia", "", "3", "Intro to Rust", "9")

        assert "Tech Talk updated successfully!" in result.output
        assert "Posted By: Alicia" in result.output
        assert "Description: Basics" in result.output

        with RecordStore(db_path) as store:
            assert store.find_by_title("Intro to Rust").posted_by == "Alicia"

    def test_update_missing_does_not_prompt_further(self, runner, db_path):
        result = menu(runner, db_path, "6", "Nope", "9")

        assert result.exit_code == 0
        assert "Tech Talk not found." in result.output
        assert "leave blank to skip" not in result.output

    def test_delete(self, runner, db_path):
        result = menu(runner, db_path, *ADD_RUST, "7", "Intro to Rust", "7", "Intro to Rust", "9")

        assert "Tech Talk deleted." in result.output
        assert "Tech Talk not found." in result.output

        with RecordStore(db_path) as store:
            assert store.count() == 0

    def test_sort(self, runner, db_path):
        with RecordStore(db_path) as store:
            store.insert(TalkRecord("Older Talk", date="2023-01-01"))
            store.insert(TalkRecord("Newer Talk", date="2024-01-01"))

        result = menu(runner, db_path, "8", "1", "9")

        assert "Sorted Tech Talks:" in result.output
        sorted_part = result.output.split("Sorted Tech Talks:")[1]
        assert sorted_part.index("Newer Talk") < sorted_part.index("Older Talk")

    def test_sort_invalid_selector(self, runner, db_path):
        result = menu(runner, db_path, "8", "3", "9")

        assert "Invalid choice!" in result.output
        assert "Sorted Tech Talks:" not in result.output

    def test_sort_malformed_date_is_reported(self, runner, db_path):
        with RecordStore(db_path) as store:
            store.insert(TalkRecord("Broken", date="yesterday"))

        result = menu(runner, db_path, "8", "2", "9")

        assert result.exit_code == 0
        assert "Invalid date" in result.output

    def test_data_persists_between_sessions(self, runner, db_path):
        menu(runner, db_path, *ADD_RUST, "9")

        result = menu(runner, db_path, "3", "INTRO TO RUST", "9")

        assert "Loaded 1 tech talks into memory." in result.output
        assert "Description: Basics" in result.output

    def test_connection_failure(self, runner, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        result = runner.invoke(cli, ["--db", str(blocker / "techtalk.db")], input="9\n")

        assert result.exit_code == 1
        assert "Database connection failed" in result.output
        assert "INTERNAL TECH TALK PORTAL" not in result.output


class TestCommands:
    """Non-interactive subcommands."""

    @pytest.fixture
    def seeded(self, db_path):
        with RecordStore(db_path) as store:
            store.insert(TalkRecord("Older Talk", "d", "Alice", "2023-01-01", ["go"]))
            store.insert(TalkRecord("Newer Talk", "d", "Bob", "2024-01-01", ["rust", "go"]))
        return db_path

    def test_list(self, runner, seeded):
        result = runner.invoke(cli, ["--db", seeded, "list"])

        assert result.exit_code == 0
        assert "Tech Talks (2)" in result.output
        assert "Older Talk" in result.output

    def test_list_sorted(self, runner, seeded):
        result = runner.invoke(cli, ["--db", seeded, "list", "--sort", "newest"])

        assert result.exit_code == 0
        assert result.output.index("Newer Talk") < result.output.index("Older Talk")

    def test_list_empty(self, runner, db_path):
        result = runner.invoke(cli, ["--db", db_path, "list"])

        assert result.exit_code == 0
        assert "No tech talks available!" in result.output

    def test_stats(self, runner, seeded):
        result = runner.invoke(cli, ["--db", seeded, "stats"])

        assert result.exit_code == 0
        assert "Total Tech Talks: 2" in result.output
        assert "Unique Tags: 2" in result.output
        assert "Latest: 2024-01-01" in result.output

    def test_migrate(self, runner, db_path):
        result = runner.invoke(cli, ["--db", db_path, "migrate"])

        assert result.exit_code == 0
        assert "Schema version: 2" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestStoreFailures:
    """Store errors after startup are reported without ending the session."""

    def test_store_error_during_command_keeps_menu_running(self, runner, db_path):
        @click.command()
        def closed_store_menu():
            store = RecordStore(db_path).open()
            catalog = CatalogManager(store)
            catalog.load()
            store.close()
            run_menu(catalog)

        result = runner.invoke(closed_store_menu, input="7\nX\n2\n9\n")

        assert result.exit_code == 0
        assert "Database error: Record store is not open" in result.output
        after_error = result.output.split("Database error")[1]
        assert "No tech talks available!" in after_error
        assert "Exiting portal..." in after_error

    def test_malformed_stored_tags_at_startup(self, runner, db_path):
        with RecordStore(db_path) as store:
            store.insert(TalkRecord("Hand Edited", date="2024-01-01"))
        conn = sqlite3.connect(db_path)
        conn.execute("UPDATE talks SET tags = 'rust, go' WHERE title = 'Hand Edited'")
        conn.commit()
        conn.close()

        result = menu(runner, db_path, "9")

        assert result.exit_code == 1
        assert "Failed to load tech talks" in result.output
        assert "Hand Edited" in result.output
        assert "INTERNAL TECH TALK PORTAL" not in result.output


class TestLogLevel:

    def test_known_level_names(self):
        assert resolve_log_level("INFO") == logging.INFO
        assert resolve_log_level("debug") == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self):
        assert resolve_log_level("loud") == logging.WARNING

    def test_bad_env_level_does_not_block_startup(self, runner, db_path, monkeypatch):
        monkeypatch.setattr(techtalk.cli, "LOG_LEVEL", "LOUD")

        result = runner.invoke(cli, ["--db", db_path, "migrate"])

        assert result.exit_code == 0
        assert "Schema version: 2" in result.output
