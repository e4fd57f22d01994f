"""Tests for CSV parsing and CSV/JSON export."""

import io
import json
from pathlib import Path

from tablab.data.dataset import Dataset
from tablab.data.io import read_csv, read_csv_text, to_csv_text, to_json_text, to_records


class TestReadCsv:
    """Parsing comma-separated input into datasets."""

    def test_plain_comma_separated(self) -> None:
        ds = read_csv_text("a,b\n1,2\n3,4\n")
        assert ds.header == ("a", "b")
        assert ds.rows == (("1", "2"), ("3", "4"))

    def test_cells_stay_strings(self) -> None:
        ds = read_csv_text("id,code\n1,007\n")
        assert ds.rows == (("1", "007"),)

    def test_empty_field_is_empty_string(self) -> None:
        ds = read_csv_text("a,b\n1,\n")
        assert ds.rows == (("1", ""),)

    def test_long_rows_are_truncated(self) -> None:
        ds = read_csv_text("a,b\n1,2,3\n4,5\n")
        assert ds.rows == (("1", "2"), ("4", "5"))

    def test_short_rows_have_missing_cells(self) -> None:
        ds = read_csv_text("a,b\n1\n")
        assert ds.column("a") == ["1"]
        assert ds.column("b") == [None]

    def test_empty_input(self) -> None:
        assert read_csv_text("") == Dataset.empty()

    def test_read_from_path(self, tmp_path: Path) -> None:
        path = tmp_path / "data.csv"
        path.write_text("x,y\n1,2\n", encoding="utf-8")
        ds = read_csv(path)
        assert ds.header == ("x", "y")
        assert ds.n_rows == 1

    def test_read_from_buffer(self) -> None:
        ds = read_csv(io.StringIO("x\n1\n2\n"))
        assert ds.column("x") == ["1", "2"]


class TestExport:
    """CSV and JSON rendering."""

    def test_to_csv_text(self) -> None:
        ds = Dataset.from_rows([["a", "b"], ["1", ""], ["3", "4"]])
        assert to_csv_text(ds) == "a,b\n1,\n3,4"

    def test_csv_round_trip(self) -> None:
        ds = Dataset.from_rows([["a", "b"], ["1", "x"], ["3", "4"]])
        assert read_csv_text(to_csv_text(ds)) == ds

    def test_to_records_keyed_by_header(self) -> None:
        ds = Dataset.from_rows([["a", "b"], ["1", "2"], ["3"]])
        assert to_records(ds) == [{"a": "1", "b": "2"}, {"a": "3"}]

    def test_to_json_text(self) -> None:
        ds = Dataset.from_rows([["name", "city"], ["Zoë", "Köln"]])
        text = to_json_text(ds)
        assert json.loads(text) == [{"name": "Zoë", "city": "Köln"}]
        assert "Köln" in text
