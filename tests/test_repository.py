"""Unit tests for the SQLModel option repository."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from global_options.domain.repositories import OptionQuery, OptionRow
from global_options.infra.repositories import SQLModelOptionRepository
from global_options.infra.repositories.option import esc_like, glob_to_like


@pytest.fixture
def repo(session_factory):
    return SQLModelOptionRepository(session_factory)


@pytest.fixture
def seeded(repo):
    repo.upsert("siteurl", '"https://example.test"', "yes")
    repo.upsert("blogname", '"Example"', "yes")
    repo.upsert("cron", '{"jobs": []}', "no")
    repo.upsert("_transient_feed", '"cached"', "no")
    repo.upsert("_transient_timeout_feed", "1700000100", "no")
    repo.upsert("rate_100%", '"odd"', "no")
    return repo


def names(rows):
    return [row.name for row in rows]


def test_upsert_inserts_then_overwrites(repo):
    assert repo.upsert("color", '"red"', "yes") is True
    assert repo.upsert("color", '"blue"', "no") is True

    row = repo.get_row("color")
    assert isinstance(row, OptionRow)
    assert (row.value, row.autoload) == ('"blue"', "no")
    assert len(repo.scan(OptionQuery(search="color"))) == 1


def test_get_row_missing(repo):
    assert repo.get_row("missing") is None


def test_update_value_and_flag(repo):
    repo.upsert("color", '"red"', "yes")

    assert repo.update("color", '"green"') is True
    assert repo.update("color", autoload="no") is True
    assert repo.get_row("color") == OptionRow("color", '"green"', "no", repo.get_row("color").id)


def test_update_missing_row_or_nothing_to_change(repo):
    repo.upsert("color", '"red"', "yes")

    assert repo.update("absent", '"x"') is False
    assert repo.update("color") is False


def test_delete(repo):
    repo.upsert("color", '"red"', "yes")

    assert repo.delete("color") is True
    assert repo.delete("color") is False
    assert repo.get_row("color") is None


def test_scan_keeps_insertion_order(seeded):
    rows = seeded.scan(OptionQuery())

    assert names(rows) == [
        "siteurl",
        "blogname",
        "cron",
        "_transient_feed",
        "_transient_timeout_feed",
        "rate_100%",
    ]
    assert rows[0].id < rows[-1].id


def test_scan_search_and_exclude(seeded):
    assert names(seeded.scan(OptionQuery(search="*name"))) == ["blogname"]
    assert names(seeded.scan(OptionQuery(search="site???"))) == ["siteurl"]
    assert names(seeded.scan(OptionQuery(search="rate_100%"))) == ["rate_100%"]
    assert names(seeded.scan(OptionQuery(search="rate?100*", exclude="*%"))) == []
    assert "cron" not in names(seeded.scan(OptionQuery(exclude="c*")))


def test_scan_underscore_is_literal(seeded):
    seeded.upsert("ratex100%", '"x"', "no")

    assert names(seeded.scan(OptionQuery(search="rate_100*"))) == ["rate_100%"]


def test_scan_autoload_and_transient_filters(seeded):
    assert names(seeded.scan(OptionQuery(autoload="on"))) == ["siteurl", "blogname"]
    assert "siteurl" not in names(seeded.scan(OptionQuery(autoload="off")))
    assert names(seeded.scan(OptionQuery(transients=True))) == ["_transient_feed", "_transient_timeout_feed"]
    assert not any(n.startswith("_transient_") for n in names(seeded.scan(OptionQuery(transients=False))))


def test_option_query_rejects_bad_autoload():
    with pytest.raises(ValueError):
        OptionQuery(autoload="yes")


def test_load_autoloaded(seeded):
    assert seeded.load_autoloaded() == {"siteurl": '"https://example.test"', "blogname": '"Example"'}


def test_load_autoloaded_falls_back_to_all_rows(repo):
    repo.upsert("a", '"1"', "no")
    repo.upsert("b", '"2"', "no")

    assert repo.load_autoloaded() == {"a": '"1"', "b": '"2"'}


def test_size_bytes_counts_encoded_bytes():
    assert OptionRow("n", '"é"', "yes").size_bytes == 4


def test_write_failures_return_false(db_engine, repo):
    with db_engine.begin() as connection:
        connection.exec_driver_sql("DROP TABLE global_options")

    assert repo.upsert("color", '"red"', "yes") is False
    assert repo.update("color", '"red"') is False
    assert repo.delete("color") is False
    with pytest.raises(OperationalError):
        repo.get_row("color")


def test_like_helpers():
    assert esc_like("a_b%c\\") == "a\\_b\\%c\\\\"
    assert glob_to_like("*_x?") == "%\\_x_"
