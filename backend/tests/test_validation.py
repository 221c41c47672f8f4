# tests/test_validation.py
"""
Tests for the balance validator.
"""

from decimal import Decimal

import pytest

from accounting.models import JournalVoucher
from accounting.validation import MAX_AMOUNT, LineInput, format_amount, to_money, validate_lines


def lines(*specs):
    return [LineInput(account_code=code, debit=dr, credit=cr) for code, dr, cr in specs]


@pytest.mark.django_db
class TestValidateLines:

    def test_balanced_set_is_ok(self, company, chart_of_accounts, balanced_lines):
        result = validate_lines(company, balanced_lines)

        assert result.ok
        assert result.messages == []
        assert result.total_debit == Decimal("100.00")
        assert result.total_credit == Decimal("100.00")
        assert set(result.accounts) == {"5010", "1010"}

    def test_unbalanced_reports_both_totals(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("5010", "100", "0"), ("1010", "0", "99.5")))

        assert not result.ok
        assert result.messages == ["Unbalanced: 100 != 99.5"]

    def test_empty_set(self, company, chart_of_accounts):
        result = validate_lines(company, [])
        assert result.messages == ["EmptyLineSet"]

    def test_unknown_account(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("9999", "100", "0"), ("1010", "0", "100")))
        assert result.messages == ["UnknownAccount: 9999"]

    def test_unknown_code_reported_once(self, company, chart_of_accounts):
        result = validate_lines(
            company,
            lines(("9999", "50", "0"), ("9999", "50", "0"), ("1010", "0", "100")),
        )
        assert result.messages == ["UnknownAccount: 9999"]

    def test_difference_within_tolerance_is_ok(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("5010", "100.01", "0"), ("1010", "0", "100")))
        assert result.ok

    def test_difference_beyond_tolerance_fails(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("5010", "100.02", "0"), ("1010", "0", "100")))
        assert result.messages == ["Unbalanced: 100.02 != 100"]

    def test_tolerance_is_configurable(self, settings, company, chart_of_accounts):
        settings.LEDGER_BALANCE_TOLERANCE = "0"
        result = validate_lines(company, lines(("5010", "100.01", "0"), ("1010", "0", "100")))
        assert result.messages == ["Unbalanced: 100.01 != 100"]

    def test_all_errors_are_collected(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("9999", "100", "0"), ("1010", "0", "80")))
        assert result.messages == ["UnknownAccount: 9999", "Unbalanced: 100 != 80"]

    def test_line_with_both_sides_is_ambiguous(self, company, chart_of_accounts):
        result = validate_lines(
            company,
            lines(("5010", "100", "100"), ("1010", "50", "0"), ("1010", "0", "50")),
        )
        assert result.messages == ["AmbiguousLine: line 1"]

    def test_line_with_neither_side_is_empty(self, company, chart_of_accounts):
        result = validate_lines(
            company,
            lines(("5010", "100", "0"), ("5010", "0", "0"), ("1010", "0", "100")),
        )
        assert result.messages == ["EmptyLine: line 2"]

    def test_negative_amount(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("5010", "-100", "0"), ("1010", "-100", "0")))
        assert "NegativeAmount: line 1" in result.messages
        assert "NegativeAmount: line 2" in result.messages

    def test_amount_beyond_column_is_out_of_range(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("5010", "1e20", "0"), ("1010", "0", "1e20")))
        assert result.messages == ["AmountOutOfRange: line 1", "AmountOutOfRange: line 2"]

    def test_total_beyond_column_is_out_of_range(self, company, chart_of_accounts):
        top = str(MAX_AMOUNT)
        result = validate_lines(
            company, lines(("5010", top, "0"), ("5020", top, "0"), ("1010", "0", top), ("1010", "0", top)),
        )
        assert result.messages == ["AmountOutOfRange: total"]

    def test_largest_storable_amount_is_ok(self, company, chart_of_accounts):
        top = str(MAX_AMOUNT)
        assert validate_lines(company, lines(("5010", top, "0"), ("1010", "0", top))).ok

    def test_zero_amount_voucher(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("5010", "0", "0"), ("1010", "0", "0")))
        assert result.messages == ["EmptyLine: line 1", "EmptyLine: line 2", "ZeroAmountVoucher"]

    def test_header_and_inactive_accounts_are_not_postable(self, company, chart_of_accounts):
        result = validate_lines(company, lines(("1000", "100", "0"), ("6990", "0", "100")))
        assert result.messages == ["InactiveAccount: 1000", "InactiveAccount: 6990"]

    def test_other_tenants_accounts_are_unknown(
        self, company, chart_of_accounts, second_company, second_company_accounts,
    ):
        specs = (("5010", "100", "0"), ("1010", "0", "100"))

        assert validate_lines(company, lines(*specs)).ok
        assert validate_lines(second_company, lines(*specs)).messages == ["UnknownAccount: 5010"]

    def test_validation_is_pure(self, company, chart_of_accounts):
        line_set = lines(("5010", "100", "0"), ("1010", "0", "99.5"))

        first = validate_lines(company, line_set)
        second = validate_lines(company, line_set)

        assert first.messages == second.messages
        assert JournalVoucher.objects.count() == 0


class TestAmounts:

    def test_amounts_are_quantized_to_cents(self):
        line = LineInput(account_code=" 5010 ", debit="10.005", credit=None)

        assert line.account_code == "5010"
        assert line.debit == Decimal("10.01")
        assert line.credit == Decimal("0.00")

    @pytest.mark.parametrize("value,expected", [
        (Decimal("100.00"), "100"),
        (Decimal("99.50"), "99.5"),
        (Decimal("0.00"), "0"),
        (Decimal("1200.25"), "1200.25"),
    ])
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected

    def test_to_money_accepts_floats(self):
        assert to_money(99.5) == Decimal("99.50")

    def test_to_money_handles_huge_values(self):
        assert to_money("1e30") == Decimal("1" + "0" * 30 + ".00")
