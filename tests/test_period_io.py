"""Tests for cfgaap.period_io."""

import json
from decimal import Decimal

import pytest

from cfgaap.period_io import load_period


class TestLoadJson:
    def test_object_with_period_and_item_list(self, tmp_path):
        path = tmp_path / "fy2024.json"
        path.write_text(
            '{"period": "FY2024", "items": ['
            '{"label": "Cash", "amount": 140.10},'
            '{"label": "Receivables", "amount": 40}'
            ']}',
            encoding="utf-8",
        )
        period = load_period(path)
        assert period.period_label == "FY2024"
        assert period.items == [("Cash", Decimal("140.10")), ("Receivables", 40)]
        assert period.source == path

    def test_floats_parsed_as_decimal(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text('{"Cash": 0.1}', encoding="utf-8")
        (item,) = load_period(path).items
        assert isinstance(item[1], Decimal)
        assert item[1] == Decimal("0.1")

    def test_bare_object_uses_file_stem(self, tmp_path):
        path = tmp_path / "FY2023.json"
        path.write_text(json.dumps({"Cash": 100, "Inventory": 80}), encoding="utf-8")
        period = load_period(path)
        assert period.period_label == "FY2023"
        assert period.items == [("Cash", 100), ("Inventory", 80)]

    def test_bare_list_of_pairs(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text('[["Cash", 1], {"label": "Inventory", "amount": "2"}]', encoding="utf-8")
        assert load_period(path).items == [("Cash", 1), ("Inventory", "2")]

    def test_duplicate_labels_preserved(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text('{"Cash": 1, "Cash": 2}', encoding="utf-8")
        assert load_period(path).items == [("Cash", 1), ("Cash", 2)]

    def test_item_missing_amount(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text('[{"label": "Cash"}]', encoding="utf-8")
        with pytest.raises(ValueError, match="'label' and 'amount'"):
            load_period(path)

    def test_scalar_rejected(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text("42", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a list or object"):
            load_period(path)


class TestLoadCsv:
    def test_label_and_amount_columns(self, tmp_path):
        path = tmp_path / "FY2024.csv"
        path.write_text("Label,Amount\nCash,140\nReceivables,40.5\n\n", encoding="utf-8")
        period = load_period(path)
        assert period.period_label == "FY2024"
        assert period.items == [("Cash", "140"), ("Receivables", "40.5")]

    def test_period_column(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text("period,label,amount\nFY2024,Cash,1\nFY2024,Inventory,2\n", encoding="utf-8")
        assert load_period(path).period_label == "FY2024"

    def test_byte_order_mark_ignored(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text("\ufefflabel,amount\n現金及び預金,100\n", encoding="utf-8")
        assert load_period(path).items == [("現金及び預金", "100")]

    def test_mixed_periods_rejected(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text("period,label,amount\nFY2023,Cash,1\nFY2024,Cash,2\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mixes several periods"):
            load_period(path)

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text("name,value\nCash,1\n", encoding="utf-8")
        with pytest.raises(ValueError, match="'label' and 'amount'"):
            load_period(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="empty CSV"):
            load_period(path)


class TestLoadPeriod:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_period(tmp_path / "missing.json")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "p.xlsx"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="unsupported file type"):
            load_period(path)
