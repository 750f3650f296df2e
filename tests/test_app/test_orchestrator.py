"""
Tests for ShopOrchestrator wiring and the CLI commands.
"""

import os
import tempfile
from unittest.mock import patch

import pytest

from main import build_parser, run_command
from src.models.rating import Rating
from src.orchestrator import ShopOrchestrator


@pytest.fixture
def orchestrator():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield ShopOrchestrator(
            data_dir=os.path.join(tmpdir, "data"),
            reports_dir=os.path.join(tmpdir, "reports"),
            temp_dir=os.path.join(tmpdir, "temp")
        )


def run_cli(orchestrator, *argv):
    args = build_parser().parse_args(list(argv))
    return run_command(args, orchestrator)


def test_start_loads_data(orchestrator):
    (orchestrator.storage.data_dir / "product101.txt").write_text("D,101,Tea,1.99,0\n", encoding="utf-8")

    catalog = orchestrator.start()

    assert orchestrator.started
    assert catalog.find_product(101).name == "Tea"


def test_start_fails_when_data_unreadable(orchestrator):
    with patch.object(orchestrator.storage, "list_product_files", side_effect=OSError("gone")):
        with pytest.raises(RuntimeError):
            orchestrator.start()


def test_run_demo(orchestrator):
    report = orchestrator.run_demo("en-GB")

    lines = report.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Tea, price: £1.99, rating: ★★★★,")
    assert lines[1] == "Review: ★★★★\tNice hot cup of tea"


def test_cli_create_review_and_report(orchestrator, capsys):
    orchestrator.start()

    assert run_cli(orchestrator, "create", "102", "Coffee", "2.99") == 0
    assert run_cli(orchestrator, "review", "102", "5", "Strong") == 0
    assert run_cli(orchestrator, "--locale", "en-US", "report", "102", "--client", "cli") == 0
    assert "Coffee is now rated ★★★★★" in capsys.readouterr().out

    assert (orchestrator.storage.data_dir / "product102.txt").read_text(encoding="utf-8") == \
        "D,102,Coffee,2.99,5\n"
    assert (orchestrator.storage.reports_dir / "product102_report_cli.txt").exists()


def test_cli_review_unknown_product(orchestrator):
    orchestrator.start()
    assert run_cli(orchestrator, "review", "404", "3", "Nothing here") == 1


def test_cli_list_and_discounts(orchestrator, capsys):
    orchestrator.start()
    orchestrator.catalog.create_product(101, "Tea", "1.99", Rating.FOUR_STAR)
    orchestrator.catalog.create_product(102, "Coffee", "2.99", Rating.ONE_STAR)

    assert run_cli(orchestrator, "--locale", "en-US", "list", "--min-rating", "2") == 0
    out = capsys.readouterr().out
    assert "Tea, price: $1.99" in out
    assert "Coffee" not in out

    assert run_cli(orchestrator, "--locale", "en-US", "discounts") == 0
    out = capsys.readouterr().out
    assert "★★★★\t$0.20" in out
    assert "★\t$0.30" in out


def test_cli_dump_and_restore(orchestrator):
    orchestrator.start()
    orchestrator.catalog.create_product(101, "Tea", "1.99")

    assert run_cli(orchestrator, "dump") == 0
    assert len(orchestrator.catalog) == 0
    assert run_cli(orchestrator, "restore") == 0
    assert orchestrator.catalog.find_product(101) is not None


def test_cli_rejects_bad_rating():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["review", "101", "9", "Too good"])


def test_run_demo_without_product(orchestrator):
    orchestrator.start()

    with patch.object(orchestrator.catalog, "create_product", return_value=None):
        assert orchestrator.run_demo("en-GB") is None
        assert run_cli(orchestrator, "demo") == 1

    assert not list(orchestrator.storage.reports_dir.iterdir())
