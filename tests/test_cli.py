from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from fakes import make_item, make_store
from finditfast.cli.main import app
from finditfast.core.models import Coordinates

runner = CliRunner()


@pytest.fixture
def cli_engine(engine, item_index, store_directory):
    item_index.items = [make_item("i1", "Milk", "virtual_S1", verified=True, price=2.49)]
    store_directory.stores = [make_store("S1", location=Coordinates(40.018, -74.0))]
    with patch("finditfast.cli.main._build_engine", return_value=engine):
        yield engine


def test_search_shows_store_and_distance(cli_engine):
    result = runner.invoke(app, ["search", "milk", "--lat", "40.0", "--lon", "-74.0"])
    assert result.exit_code == 0
    assert "Found 1 result(s)" in result.output
    assert "Corner Market" in result.output
    assert "2.0km" in result.output


def test_search_no_results(cli_engine):
    result = runner.invoke(app, ["search", "caviar"])
    assert result.exit_code == 0
    assert "No items found" in result.output


def test_search_requires_both_coordinates(cli_engine):
    result = runner.invoke(app, ["search", "milk", "--lat", "40.0"])
    assert result.exit_code != 0


def test_search_unavailable_exits_nonzero(cli_engine, item_index):
    item_index.fail_times = 2
    result = runner.invoke(app, ["search", "milk"])
    assert result.exit_code == 1
    assert "temporarily unavailable" in result.output


def test_history_round_trip(cli_engine):
    runner.invoke(app, ["search", "milk"])
    result = runner.invoke(app, ["history"])
    assert "milk" in result.output

    runner.invoke(app, ["clear-history"])
    result = runner.invoke(app, ["history"])
    assert "No recent searches" in result.output


@pytest.mark.parametrize("flags,expect_verified", [(["--verified"], True), ([], False)])
def test_item_add_stamps_verification_time(flags, expect_verified):
    with patch("finditfast.cli.main.ItemRepository") as repo_cls:
        result = runner.invoke(app, ["item", "add", "Milk", "--store", "virtual_S1"] + flags)

    assert result.exit_code == 0
    listing = repo_cls.return_value.add.call_args[0][0]
    assert listing.store_id == "virtual_S1"
    assert listing.verified is expect_verified
    assert (listing.verified_at is not None) is expect_verified
