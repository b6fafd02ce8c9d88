"""
Tests for bank statement parsing.

Covers:
- Header row discovery below preamble rows
- Date normalization (DD/MM/YYYY with and without time)
- Amount parsing and the dedup hash
- Column mapping detection and validation
"""

from decimal import Decimal

import pytest

from teamledger.core.errors import LedgerValidationError
from teamledger.models.bank import ColumnMapping, Direction
from teamledger.services.bank_import import (
    detect_mapping,
    find_header_row,
    import_hash,
    normalize_date,
    normalize_transactions,
    parse_amount,
    parse_bank_file,
    resolve_mapping,
    select_new_transactions,
)

STATEMENT_ROWS = [
    ["Hesap Hareketleri", None, None, None],
    ["IBAN", "TR00 0000", None, None],
    [None, None, None, None],
    ["Tarih/Saat", "Açıklama", "İşlem Tutarı*", "Referans"],
    ["04/01/2026-15:29:07", "Aidat Ocak", "200,00", "R1"],
    [None, None, None, None],
    ["05/01/2026-09:00:00", "Market", "-150,50", "R2"],
]


class TestDates:
    def test_date_with_time_suffix(self):
        assert normalize_date("04/01/2026-15:29:07") == "2026-01-04"

    def test_plain_day_month_year(self):
        assert normalize_date("31/12/2025") == "2025-12-31"

    def test_iso_passes_through(self):
        assert normalize_date("2026-01-04") == "2026-01-04"

    def test_single_digit_parts_are_padded(self):
        assert normalize_date("4/1/2026") == "2026-01-04"

    def test_unrecognized_text_passes_through(self):
        assert normalize_date("yesterday") == "yesterday"


class TestHeaderDetection:
    def test_header_found_below_preamble(self):
        assert find_header_row(STATEMENT_ROWS) == 3

        sheet = parse_bank_file(STATEMENT_ROWS)
        assert sheet.header_row == 3
        assert sheet.data_start == 4
        assert sheet.columns == ["Tarih/Saat", "Açıklama", "İşlem Tutarı*", "Referans"]

    def test_blank_rows_are_dropped(self):
        sheet = parse_bank_file(STATEMENT_ROWS)
        assert len(sheet.records) == 2
        assert sheet.records[1]["Açıklama"] == "Market"

    def test_first_row_used_without_marker(self):
        rows = [["When", "What", "How much"], ["2026-01-04", "Fee", "10"]]
        sheet = parse_bank_file(rows)
        assert sheet.header_row == 0
        assert sheet.records == [{"When": "2026-01-04", "What": "Fee", "How much": "10"}]

    def test_marker_beyond_scan_window_is_ignored(self):
        rows = [["x"]] * 5 + [["Date", "Description", "Amount"]]
        assert find_header_row(rows, scan_rows=5) is None

    def test_empty_file_rejected(self):
        with pytest.raises(LedgerValidationError):
            parse_bank_file([])


class TestAmounts:
    def test_decimal_comma(self):
        assert parse_amount("-150,50") == Decimal("-150.50")

    def test_thousands_separators(self):
        assert parse_amount("1.234,56") == Decimal("1234.56")
        assert parse_amount("1,234.56") == Decimal("1234.56")

    def test_numeric_cells(self):
        assert parse_amount(12.5) == Decimal("12.5")
        assert parse_amount(200) == Decimal(200)

    def test_blank_is_zero(self):
        assert parse_amount(None) == Decimal(0)
        assert parse_amount("  ") == Decimal(0)

    def test_garbage_rejected(self):
        with pytest.raises(LedgerValidationError):
            parse_amount("abc")

    def test_hash_strips_non_alphanumerics(self):
        assert import_hash("2026-01-04", "Aidat - Ocak!", Decimal("200.00")) == "20260104AidatOcak200"


class TestMapping:
    def test_known_turkish_headers_detected(self):
        mapping = detect_mapping(["Tarih/Saat", "Açıklama", "İşlem Tutarı*", "Referans"])
        assert mapping.txn_date == "Tarih/Saat"
        assert mapping.description == "Açıklama"
        assert mapping.amount == "İşlem Tutarı*"
        assert mapping.reference == "Referans"

    def test_nothing_detected_without_date_column(self):
        assert detect_mapping(["Description", "Amount"]) == ColumnMapping()

    def test_explicit_mapping_required_fields(self):
        with pytest.raises(LedgerValidationError):
            resolve_mapping(["When", "What"], ColumnMapping(txn_date="When", description="What"))

    def test_explicit_mapping_unknown_column(self):
        explicit = ColumnMapping(txn_date="When", description="What", amount="Missing")
        with pytest.raises(LedgerValidationError):
            resolve_mapping(["When", "What", "Sum"], explicit)

    def test_explicit_overrides_detected(self):
        columns = ["Date", "Description", "Amount", "Net"]
        mapping = resolve_mapping(columns, ColumnMapping(amount="Net"))
        assert mapping.txn_date == "Date"
        assert mapping.amount == "Net"


class TestNormalization:
    def test_statement_rows_normalized(self):
        sheet = parse_bank_file(STATEMENT_ROWS)
        mapping = resolve_mapping(sheet.columns)
        txns = normalize_transactions(sheet.records, mapping, "ocak.xls")

        fee, market = txns
        assert fee.txn_date == "2026-01-04"
        assert fee.amount_cents == 20000
        assert fee.direction == Direction.IN
        assert fee.reference == "R1"

        assert market.amount_cents == 15050
        assert market.direction == Direction.OUT
        assert market.signed_amount_cents == -15050
        assert market.import_filename == "ocak.xls"

    def test_direction_column_wins(self):
        mapping = ColumnMapping(txn_date="Date", description="Description", amount="Amount", direction="Direction")
        records = [{"Date": "2026-01-04", "Description": "Fuel", "Amount": "80", "Direction": "OUTGOING"}]
        (txn,) = normalize_transactions(records, mapping)
        assert txn.direction == Direction.OUT
        assert txn.amount_cents == 8000

    def test_missing_date_names_the_row(self):
        mapping = ColumnMapping(txn_date="Date", description="Description", amount="Amount")
        records = [
            {"Date": "2026-01-04", "Description": "ok", "Amount": "1"},
            {"Description": "no date", "Amount": "2"},
        ]
        with pytest.raises(LedgerValidationError, match="Row 2"):
            normalize_transactions(records, mapping)

    def test_known_and_repeated_hashes_skipped(self):
        mapping = ColumnMapping(txn_date="Date", description="Description", amount="Amount")
        records = [
            {"Date": "2026-01-04", "Description": "A", "Amount": "1"},
            {"Date": "2026-01-04", "Description": "A", "Amount": "1"},
            {"Date": "2026-01-05", "Description": "B", "Amount": "2"},
        ]
        txns = normalize_transactions(records, mapping)
        fresh, skipped = select_new_transactions(txns, {txns[2].import_hash})
        assert [t.description for t in fresh] == ["A"]
        assert skipped == 2
