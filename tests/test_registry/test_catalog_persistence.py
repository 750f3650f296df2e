"""
Tests for catalog load/save/dump/restore.

These are maintenance operations and run here with no concurrent traffic.
"""

import os
import tempfile
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from src.models.product import ProductKind
from src.models.rating import Rating
from src.models.review import Review
from src.registry.catalog import ProductCatalog
from src.utils.locale_formatter import FormatterRegistry
from src.utils.storage import StorageManager
import config.settings as settings


@pytest.fixture(scope="module")
def formatters():
    return FormatterRegistry(settings.LOCALES_DIR)


@pytest.fixture
def storage():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield StorageManager(
            data_dir=os.path.join(tmpdir, "data"),
            reports_dir=os.path.join(tmpdir, "reports"),
            temp_dir=os.path.join(tmpdir, "temp")
        )


def write_data(storage, name, text):
    (storage.data_dir / name).write_text(text, encoding="utf-8")


def test_load_all_data(storage, formatters):
    write_data(storage, "product101.txt", "D,101,Tea,1.99,4\n")
    write_data(storage, "reviews101.txt", "4,Nice hot cup of tea\n5,Rich, dark and smooth\n")
    write_data(storage, "product103.txt", "F,103,Cake,3.99,0,2024-06-01\n")
    catalog = ProductCatalog(storage, formatters)

    assert catalog.load_all_data() == 2

    tea = catalog.find_product(101)
    assert tea.kind is ProductKind.DRINK
    assert tea.rating is Rating.FOUR_STAR
    assert catalog.get_reviews(101) == [
        Review(Rating.FOUR_STAR, "Nice hot cup of tea"),
        Review(Rating.FIVE_STAR, "Rich, dark and smooth"),
    ]
    assert catalog.find_product(103).best_before == date(2024, 6, 1)
    assert catalog.get_reviews(103) == []


def test_load_skips_bad_records(storage, formatters):
    write_data(storage, "product101.txt", "D,101,Tea,1.99,4\n")
    write_data(storage, "reviews101.txt", "4,Good\nnot a review\n9,Too many stars\n2,Meh\n")
    write_data(storage, "product102.txt", "D,102,Coffee,cheap,4\n")
    write_data(storage, "product104.txt", "X,104,Mystery,1.00,0\n")
    write_data(storage, "product105.txt", "")
    catalog = ProductCatalog(storage, formatters)

    assert catalog.load_all_data() == 1
    assert [r.comments for r in catalog.get_reviews(101)] == ["Good", "Meh"]


def test_load_skips_product_file_with_invalid_encoding(storage, formatters):
    write_data(storage, "product101.txt", "D,101,Tea,1.99,4\n")
    (storage.data_dir / "product102.txt").write_bytes(b"D,102,Caf\xe9,2.99,0\n")
    catalog = ProductCatalog(storage, formatters)

    assert catalog.load_all_data() == 1
    assert catalog.find_product(102) is None


def test_load_ignores_reviews_file_with_invalid_encoding(storage, formatters):
    write_data(storage, "product101.txt", "D,101,Tea,1.99,4\n")
    (storage.data_dir / "reviews101.txt").write_bytes(b"4,tr\xe8s bon\n")
    catalog = ProductCatalog(storage, formatters)

    assert catalog.load_all_data() == 1
    assert catalog.find_product(101).rating is Rating.FOUR_STAR
    assert catalog.get_reviews(101) == []


def test_load_duplicate_identity_first_file_wins(storage, formatters):
    write_data(storage, "product101.txt", "D,101,Tea,1.99,4\n")
    write_data(storage, "product101b.txt", "D,101,Tea,9.99,1\n")
    catalog = ProductCatalog(storage, formatters)

    assert catalog.load_all_data() == 1
    assert catalog.find_product(101).price == Decimal("1.99")


def test_load_directory_failure_keeps_catalog(storage, formatters):
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))

    with patch.object(storage, "list_product_files", side_effect=OSError("disk gone")):
        assert catalog.load_all_data() is None

    assert catalog.find_product(101) is not None


def test_save_then_load_round_trip(storage, formatters):
    """All four kind x has-reviews combinations survive a save and reload."""
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))
    catalog.create_product(102, "Coffee", Decimal("2.99"), Rating.THREE_STAR)
    catalog.create_product(103, "Cake", Decimal("3.99"), Rating.NOT_RATED, date(2024, 6, 1))
    catalog.create_product(104, "Cookie", Decimal("2.49"), Rating.TWO_STAR, date(2024, 6, 2))
    catalog.review_product(101, Rating.FOUR_STAR, "Nice hot cup of tea")
    catalog.review_product(103, Rating.FIVE_STAR, "Best cake, ever")
    catalog.review_product(103, Rating.THREE_STAR, "Fine")

    assert catalog.save_all_data() == 4

    reloaded = ProductCatalog(storage, formatters)
    assert reloaded.load_all_data() == 4

    for original in catalog.products():
        restored = reloaded.find_product(original.id)
        assert restored == original
        assert (restored.kind, restored.price, restored.rating, restored.best_before) == (
            original.kind, original.price, original.rating, original.best_before
        )
        assert reloaded.get_reviews(original.id) == catalog.get_reviews(original.id)


def test_save_skips_unencodable_product(storage, formatters):
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea, green", Decimal("1.99"))
    catalog.create_product(102, "Coffee", Decimal("2.99"))

    assert catalog.save_all_data() == 1


def test_dump_clears_and_restore_brings_back(storage, formatters):
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))
    catalog.create_product(103, "Cake", Decimal("3.99"), Rating.NOT_RATED, date(2024, 6, 1))
    catalog.review_product(101, Rating.FOUR_STAR, "Nice hot cup of tea")

    snapshot = catalog.dump_data()

    assert snapshot is not None and snapshot.exists()
    assert len(catalog) == 0
    assert catalog.find_product(101) is None

    assert catalog.restore_data() is True
    assert not snapshot.exists()
    assert len(catalog) == 2
    assert catalog.find_product(101).rating is Rating.FOUR_STAR
    assert catalog.get_reviews(101) == [Review(Rating.FOUR_STAR, "Nice hot cup of tea")]
    assert catalog.find_product(103).best_before == date(2024, 6, 1)


def test_restore_without_snapshot(storage, formatters):
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))

    assert catalog.restore_data() is False
    assert len(catalog) == 1


def test_restore_corrupt_snapshot_keeps_file_and_catalog(storage, formatters):
    bad = storage.temp_dir / "catalog_1.snapshot"
    bad.write_text('{"entries": [{"product": {"id": 1}}]}', encoding="utf-8")
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))

    assert catalog.restore_data() is False
    assert bad.exists()
    assert catalog.find_product(101) is not None


def test_dump_failure_keeps_catalog(storage, formatters):
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))

    with patch.object(storage, "write_snapshot", side_effect=OSError("read-only")):
        assert catalog.dump_data() is None

    assert len(catalog) == 1


def test_dump_in_same_millisecond_keeps_earlier_snapshot(storage, formatters):
    catalog = ProductCatalog(storage, formatters)
    catalog.create_product(101, "Tea", Decimal("1.99"))

    with patch("src.utils.storage.datetime") as clock:
        clock.now.return_value.timestamp.return_value = 1700000000.0
        first = catalog.dump_data()
        second = catalog.dump_data()

    assert first != second
    assert first.exists() and second.exists()
    assert len(storage.read_snapshot(first)["entries"]) == 1
    assert storage.read_snapshot(second)["entries"] == []

    # The newest dump is restored first
    assert catalog.restore_data() is True
    assert len(catalog) == 0
    assert catalog.restore_data() is True
    assert catalog.find_product(101) is not None
