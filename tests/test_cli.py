"""Tests for the ``global-option`` command line interface."""

from __future__ import annotations

import json
import logging

import pytest
import yaml
from click.testing import CliRunner

from global_options.cli import cli, render_table
from global_options.logging_config import ROOT_LOGGER_NAME


@pytest.fixture
def run(context):
    runner = CliRunner()

    def invoke(*args, input=None):
        return runner.invoke(cli, list(args), obj=context, input=input)

    return invoke


def test_add_and_get(run):
    result = run("add", "blogname", "Example")
    assert result.exit_code == 0
    assert "Success: Added 'blogname' global option." in result.output

    result = run("get", "blogname")
    assert result.exit_code == 0
    assert result.output == "Example\n"


def test_add_existing_fails(run):
    run("add", "blogname", "Example")

    result = run("add", "blogname", "Other")

    assert result.exit_code == 1
    assert "Could not add global option 'blogname'. Does it already exist?" in result.output


def test_add_reads_value_from_stdin(run, options):
    result = run("add", "motd", input="hello from stdin")

    assert result.exit_code == 0
    assert options.get("motd") == "hello from stdin"


def test_add_json_and_autoload(run, options, repository):
    result = run("add", "site", '{"name": "Example", "tags": ["a"]}', "--format", "json", "--autoload", "yes")

    assert result.exit_code == 0
    assert options.get("site") == {"name": "Example", "tags": ["a"]}
    assert repository.get_row("site").autoload == "yes"


def test_add_invalid_json(run):
    result = run("add", "broken", "{not json", "--format", "json")

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_get_missing(run):
    result = run("get", "nope")

    assert result.exit_code == 1
    assert "Could not get 'nope' option. Does it exist?" in result.output


def test_get_formats(run):
    run("add", "site", '{"name": "Example"}', "--format", "json")

    assert json.loads(run("get", "site", "--format", "json").output) == {"name": "Example"}
    assert yaml.safe_load(run("get", "site", "--format", "yaml").output) == {"name": "Example"}
    assert run("get", "site").output == "{'name': 'Example'}\n"


def test_update_and_unchanged(run, options):
    run("add", "blogname", "Example")

    result = run("update", "blogname", "Renamed")
    assert result.exit_code == 0
    assert "Success: Updated 'blogname' global option." in result.output
    assert options.get("blogname") == "Renamed"

    result = run("update", "blogname", "Renamed")
    assert result.exit_code == 0
    assert "Success: Value passed for 'blogname' global option is unchanged." in result.output


def test_set_alias_adds_missing_option(run, options, repository):
    result = run("set", "fresh", "value")

    assert result.exit_code == 0
    assert options.get("fresh") == "value"
    assert repository.get_row("fresh").autoload == "no"


def test_update_autoload_only(run, repository):
    run("add", "blogname", "Example", "--autoload", "yes")

    result = run("update", "blogname", "Example", "--autoload", "no")

    assert result.exit_code == 0
    assert repository.get_row("blogname").autoload == "no"


def test_update_failure_message(run, options, monkeypatch):
    run("add", "blogname", "Example")
    monkeypatch.setattr(options, "update", lambda *a, **kw: False)

    result = run("update", "blogname", "Other")

    assert result.exit_code == 1
    assert "Could not update global option 'blogname'." in result.output


def test_delete(run, options):
    run("add", "blogname", "Example")

    result = run("delete", "blogname")
    assert result.exit_code == 0
    assert "Success: Deleted 'blogname' global option." in result.output
    assert options.get("blogname") is False

    result = run("delete", "blogname")
    assert result.exit_code == 1
    assert "Could not delete 'blogname' global option. Does it exist?" in result.output


@pytest.mark.parametrize("command", [["add", "alloptions", "x"], ["update", "notoptions", "x"], ["delete", "alloptions"]])
def test_protected_names(run, command):
    result = run(*command)

    assert result.exit_code == 1
    assert "is a protected option and may not be modified" in result.output


# =============================================================================
# list
# =============================================================================


@pytest.fixture
def listed(run, transients):
    run("add", "siteurl", "https://example.test", "--autoload", "yes")
    run("add", "blogname", "Example", "--autoload", "yes")
    run("add", "cron", '{"jobs": []}', "--format", "json")
    transients.set("feed", "cached", 60)
    return run


def test_list_table(listed):
    result = listed("list", "--search", "*name")

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "+-------------+--------------+",
        "| option_name | option_value |",
        "+-------------+--------------+",
        "| blogname    | Example      |",
        "+-------------+--------------+",
    ]


def test_list_excludes_transients_by_default(listed):
    names = json.loads(listed("list", "--format", "json").output)

    assert [item["option_name"] for item in names] == ["installed", "siteurl", "blogname", "cron"]


def test_list_only_transients(listed):
    result = listed("list", "--transients", "--field", "option_name")

    assert result.output.splitlines() == ["_transient_timeout_feed", "_transient_feed"]


def test_list_filters_and_fields(listed):
    result = listed("list", "--autoload", "off", "--fields", "option_name,autoload,size_bytes", "--format", "json")

    assert json.loads(result.output) == [{"option_name": "cron", "autoload": "no", "size_bytes": 12}]


def test_list_count_and_total_bytes(listed):
    assert listed("list", "--format", "count").output == "4\n"
    total = listed("list", "--exclude", "*", "--format", "total_bytes")
    assert total.output == "0\n"


def test_list_order(listed):
    result = listed("list", "--orderby", "option_name", "--order", "desc", "--field", "option_name")

    assert result.output.splitlines() == ["siteurl", "installed", "cron", "blogname"]


def test_list_csv_and_yaml(listed):
    csv_output = listed("list", "--search", "blogname", "--format", "csv").output
    assert csv_output.splitlines() == ["option_name,option_value", "blogname,Example"]

    yaml_output = listed("list", "--search", "blogname", "--format", "yaml").output
    assert yaml.safe_load(yaml_output) == [{"option_name": "blogname", "option_value": "Example"}]


def test_list_invalid_field(listed):
    result = listed("list", "--fields", "option_name,bogus")

    assert result.exit_code == 1
    assert "Invalid field: bogus." in result.output


# =============================================================================
# pluck / patch
# =============================================================================


@pytest.fixture
def structured(run):
    run("add", "site", '{"name": "Example", "tags": ["a", "b"], "limits": {"posts": 10}}', "--format", "json")
    return run


def test_pluck(structured):
    assert structured("pluck", "site", "name").output == "Example\n"
    assert structured("pluck", "site", "tags", "1").output == "b\n"
    assert structured("pluck", "site", "limits", "posts", "--format", "json").output == "10\n"


def test_pluck_missing(structured):
    assert structured("pluck", "site", "missing").exit_code == 1
    assert structured("pluck", "nope", "name").exit_code == 1


def test_patch_insert_update_delete(structured, options):
    result = structured("patch", "insert", "site", "url", "https://example.test")
    assert result.exit_code == 0
    assert "Success: Updated 'site' global option." in result.output

    structured("patch", "update", "site", "limits", "posts", "25", "--format", "json")
    structured("patch", "delete", "site", "tags", "0")

    assert options.get("site") == {
        "name": "Example",
        "tags": ["b"],
        "limits": {"posts": 25},
        "url": "https://example.test",
    }


def test_patch_value_from_stdin(structured, options):
    result = structured("patch", "update", "site", "limits", input='{"posts": 5}\n')

    assert result.exit_code == 0
    assert options.get("site")["limits"] == "{\"posts\": 5}"


def test_patch_unchanged(structured):
    result = structured("patch", "update", "site", "name", "Example")

    assert "Value passed for 'site' global option is unchanged." in result.output


def test_patch_errors(structured):
    result = structured("patch", "insert", "site", "name", "Again")
    assert result.exit_code == 1
    assert 'Cannot create key "name", key already exists.' in result.output

    result = structured("patch", "update", "site", "missing", "x")
    assert result.exit_code == 1
    assert 'No data exists for key "missing"' in result.output

    result = structured("patch", "update", "site", "limits")
    assert result.exit_code == 1
    assert "Please provide a value to patch." in result.output


def test_pluck_and_patch_numeric_dict_keys(run, options):
    run("add", "ports", '{"443": "https"}', "--format", "json")

    assert run("pluck", "ports", "443").output == "https\n"

    result = run("patch", "update", "ports", "443", "h2")
    assert result.exit_code == 0
    assert run("patch", "insert", "ports", "80", "http").exit_code == 0
    assert options.get("ports") == {"443": "h2", "80": "http"}


def test_render_table_widths():
    table = render_table([{"a": "long value", "b": 1}], ["a", "b"])

    assert table.splitlines()[1] == "| a          | b |"


def test_standalone_invocation_uses_database_url(tmp_path):
    """Without a prepared context the group builds one from configuration."""
    runner = CliRunner()
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    try:
        added = runner.invoke(cli, ["--database-url", url, "add", "blogname", "Example"])
        fetched = runner.invoke(cli, ["--database-url", url, "get", "blogname"])
    finally:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    assert added.exit_code == 0
    assert fetched.output.splitlines()[-1] == "Example"
    assert (tmp_path / "cli.db").exists()
