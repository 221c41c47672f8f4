# accounting/validation.py
"""
Balance validation for journal line sets.

validate_lines() is the single gate every posting path goes through
(manual journals, payment vouchers, GRN accruals). It never writes.

All checks run independently and every failure is reported:

    EmptyLineSet                the set has no lines
    NegativeAmount: line N      debit or credit below zero
    AmbiguousLine: line N       both debit and credit set
    EmptyLine: line N           neither debit nor credit set
    AmountOutOfRange: line N    amount above MAX_AMOUNT ("total" for the voucher totals)
    UnknownAccount: CODE        code not in the tenant's chart of accounts
    InactiveAccount: CODE       account is inactive or a header account
    Unbalanced: DR != CR        |sum(debit) - sum(credit)| > tolerance
    ZeroAmountVoucher           nothing to post

Line numbers are 1-based positions in the submitted set.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional, Sequence

from django.conf import settings

from accounting.coa import resolve_accounts


CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest amount a DecimalField(max_digits=18, decimal_places=2) column holds
MAX_AMOUNT = Decimal("9999999999999999.99")

# Wide enough to quantize any bounded input (and products of bounded inputs)
_MONEY_CONTEXT = Context(prec=60)


def to_money(value) -> Decimal:
    """Convert to a Decimal quantized to cents. None counts as zero."""
    if value is None or value == "":
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP, context=_MONEY_CONTEXT)


def format_amount(value: Decimal) -> str:
    """Render an amount without trailing zeros: 100.00 -> '100', 99.50 -> '99.5'."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def balance_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "LEDGER_BALANCE_TOLERANCE", "0.01")))


@dataclass
class LineInput:
    """One submitted journal line. Amounts are quantized on construction."""

    account_code: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    payee_id: str = ""
    description: str = ""

    def __post_init__(self):
        self.account_code = str(self.account_code or "").strip()
        self.debit = to_money(self.debit)
        self.credit = to_money(self.credit)
        self.payee_id = self.payee_id or ""
        self.description = self.description or ""


@dataclass(frozen=True)
class LineValidationError:
    code: str
    detail: Optional[str] = None

    def __str__(self):
        if self.detail is None:
            return self.code
        return f"{self.code}: {self.detail}"


@dataclass
class ValidationResult:
    errors: list = field(default_factory=list)
    accounts: dict = field(default_factory=dict)
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> list[str]:
        return [str(e) for e in self.errors]


def _line_errors(lines: Sequence[LineInput]) -> list[LineValidationError]:
    errors = []
    for index, line in enumerate(lines, start=1):
        if line.debit < 0 or line.credit < 0:
            errors.append(LineValidationError("NegativeAmount", f"line {index}"))
        elif line.debit > 0 and line.credit > 0:
            errors.append(LineValidationError("AmbiguousLine", f"line {index}"))
        elif line.debit == 0 and line.credit == 0:
            errors.append(LineValidationError("EmptyLine", f"line {index}"))
        if line.debit > MAX_AMOUNT or line.credit > MAX_AMOUNT:
            errors.append(LineValidationError("AmountOutOfRange", f"line {index}"))
    return errors


def validate_lines(company, lines: Sequence[LineInput]) -> ValidationResult:
    """
    Check a line set for one tenant.

    Returns a ValidationResult; ``ok`` is True only when no check failed.
    On success ``accounts`` maps each code to its resolved Account so the
    caller does not look them up again.
    """
    result = ValidationResult()
    lines = list(lines)

    if not lines:
        result.errors.append(LineValidationError("EmptyLineSet"))
        return result

    line_errors = _line_errors(lines)
    result.errors.extend(line_errors)

    codes = []
    for line in lines:
        if line.account_code not in codes:
            codes.append(line.account_code)
    accounts = resolve_accounts(company, codes)

    for code in codes:
        account = accounts.get(code)
        if account is None:
            result.errors.append(LineValidationError("UnknownAccount", code))
        elif not account.is_postable:
            result.errors.append(LineValidationError("InactiveAccount", code))

    total_debit = sum((line.debit for line in lines), ZERO)
    total_credit = sum((line.credit for line in lines), ZERO)
    result.total_debit = total_debit
    result.total_credit = total_credit

    line_out_of_range = any(e.code == "AmountOutOfRange" for e in line_errors)
    if not line_out_of_range and max(total_debit, total_credit) > MAX_AMOUNT:
        result.errors.append(LineValidationError("AmountOutOfRange", "total"))

    if abs(total_debit - total_credit) > balance_tolerance():
        result.errors.append(
            LineValidationError(
                "Unbalanced",
                f"{format_amount(total_debit)} != {format_amount(total_credit)}",
            )
        )

    if total_debit + total_credit <= 0:
        result.errors.append(LineValidationError("ZeroAmountVoucher"))

    result.accounts = accounts
    return result
