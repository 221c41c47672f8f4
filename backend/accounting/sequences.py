# accounting/sequences.py
"""
Human-readable document numbers.

Numbers come from per-company CompanySequence rows. The row is locked with
select_for_update for the rest of the caller's transaction, so two
concurrent postings in one company never receive the same value, and a
rolled-back posting gives its value back.
"""

from django.db import IntegrityError, transaction

from accounting.models import CompanySequence
from accounting.write_barrier import command_writes_allowed


def next_company_sequence(company, name: str) -> int:
    """
    Allocate the next sequence value for a company/name pair.
    Must run inside the caller's transaction.
    """
    with command_writes_allowed():
        try:
            seq = CompanySequence.objects.select_for_update().get(
                company=company,
                name=name,
            )
        except CompanySequence.DoesNotExist:
            try:
                # Savepoint so a losing race does not poison the outer transaction
                with transaction.atomic():
                    seq = CompanySequence.objects.create(
                        company=company,
                        name=name,
                        next_value=1,
                    )
            except IntegrityError:
                seq = CompanySequence.objects.select_for_update().get(
                    company=company,
                    name=name,
                )

        value = seq.next_value
        seq.next_value = value + 1
        seq.save(update_fields=["next_value", "updated_at"])
        return value


def next_document_number(company, prefix: str, year: int, width: int = 5, sep: str = "-") -> str:
    """Allocate e.g. JV-2024-00001 (or PV/2024/000001 with sep='/', width=6)."""
    value = next_company_sequence(company, f"{prefix}{sep}{year}")
    return f"{prefix}{sep}{year}{sep}{value:0{width}d}"
