"""
Tests for CSV file handling and seed management
"""

import logging

from tdg.config import CsvConfig
from tdg.utils import FileHandler, SeedManager, setup_logging


def test_read_csv_keeps_strings(tmp_path):
    path = tmp_path / "sample.csv"
    path.write_text("zip,note\n00501,\n02134,NA\n", encoding="utf-8")

    data = FileHandler.read_csv(path)

    assert list(data.columns) == ["zip", "note"]
    assert data["zip"].tolist() == ["00501", "02134"]
    assert data["note"].tolist() == ["", "NA"]


def test_read_without_headers():
    data = FileHandler.read_csv_text("a|b\nc|d\n", CsvConfig(delimiter="|", has_headers=False))

    assert list(data.columns) == ["field_0", "field_1"]
    assert data.values.tolist() == [["a", "b"], ["c", "d"]]


def test_write_then_read(tmp_path):
    path = FileHandler.write_csv([["Smith, John", "1"]], ["name", "id"], tmp_path / "out.csv")

    data = FileHandler.read_csv(path)
    assert data.values.tolist() == [["Smith, John", "1"]]


def test_seed_manager_is_reproducible():
    first = SeedManager(9).create_rng().integers(1000, size=5).tolist()
    second = SeedManager(9).create_rng().integers(1000, size=5).tolist()
    assert first == second


def test_setup_logging_accepts_level_names():
    logger = setup_logging("debug")
    assert logger.level == logging.DEBUG
