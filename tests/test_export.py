"""Tests for CSV export of the model series."""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from conftest import FIXED_NOW, make_payload

from sound_treasury.constants import CSV_HEADERS
from sound_treasury.pipeline.export import parse_model_csv, to_csv_text, write_model_csv
from sound_treasury.pipeline.synthetic import generate_simulated_series


class TestCsvExport:

    def test_header_row(self):
        text = to_csv_text(make_payload(count=3).data)
        assert text.splitlines()[0] == "Date,Days,Price,FairValue,+2SD,-1SD"
        assert len(text.splitlines()) == 4

    def test_row_format(self):
        point = make_payload(count=1).data[0]
        row = to_csv_text([point]).splitlines()[1].split(",")
        assert row[0] == FIXED_NOW.date().isoformat()
        assert row[2] == f"{point.actual_price:.2f}"
        assert row[3] == f"{point.fair_price:.2f}"

    def test_missing_price_is_empty(self):
        points, _ = generate_simulated_series(FIXED_NOW)
        last = to_csv_text(points).splitlines()[-1].split(",")
        assert last[2] == ""

    def test_parse_back(self):
        points, _ = generate_simulated_series(FIXED_NOW)
        frame = parse_model_csv(to_csv_text(points))
        assert list(frame.columns) == list(CSV_HEADERS)
        assert len(frame) == len(points)
        assert frame["Price"].isna().sum() == sum(1 for p in points if p.actual_price is None)
        assert list(frame["Days"]) == pytest.approx([p.days_since_genesis for p in points], abs=0.01)
        assert list(frame["FairValue"]) == pytest.approx([p.fair_price for p in points], abs=0.01)
        assert list(frame["+2SD"]) == pytest.approx([p.upper_band for p in points], abs=0.01)
        priced = [(i, p.actual_price) for i, p in enumerate(points) if p.actual_price is not None]
        assert [frame["Price"].iloc[i] for i, _ in priced] == pytest.approx([price for _, price in priced], abs=0.01)

    def test_parse_rejects_other_csv(self):
        with pytest.raises(ValueError):
            parse_model_csv("a,b\n1,2\n")

    def test_write_file(self, tmp_path):
        path = write_model_csv(make_payload(count=5).data, tmp_path / "out" / "model.csv")
        frame = pd.read_csv(path)
        assert len(frame) == 5
