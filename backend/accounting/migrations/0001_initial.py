import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CompanySequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("next_value", models.BigIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sequences", to="accounts.company")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("company", "name"), name="uniq_company_sequence_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("account_type", models.CharField(choices=[("ASSET", "Asset"), ("LIABILITY", "Liability"), ("EQUITY", "Equity"), ("REVENUE", "Revenue"), ("EXPENSE", "Expense"), ("OTHER", "Other")], db_column="type", max_length=20)),
                ("normal_balance", models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], editable=False, max_length=10)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")], default="ACTIVE", max_length=20)),
                ("is_header", models.BooleanField(default=False, help_text="Header accounts group other accounts and cannot receive postings")),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to="accounts.company")),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["company", "account_type"], name="accounting__company_5d1c0e_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uniq_account_code_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalVoucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("voucher_number", models.CharField(max_length=50)),
                ("date", models.DateField()),
                ("narration", models.CharField(blank=True, default="", max_length=255)),
                ("voucher_type", models.CharField(choices=[("MANUAL", "Manual journal"), ("PAYMENT", "Payment voucher"), ("ACCRUAL", "Accrual")], default="MANUAL", max_length=12)),
                ("status", models.CharField(choices=[("DRAFT", "Draft"), ("PENDING", "Pending"), ("POSTED", "Posted"), ("REJECTED", "Rejected"), ("CANCELLED", "Cancelled")], default="DRAFT", max_length=12)),
                ("total_debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("source_document", models.CharField(blank=True, default="", max_length=20)),
                ("source_reference", models.CharField(blank=True, default="", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="journal_vouchers", to="accounts.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_journal_vouchers", to=settings.AUTH_USER_MODEL)),
                ("posted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="posted_journal_vouchers", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["company", "date", "id"], name="accounting__company_8a7f21_idx"),
                    models.Index(fields=["company", "status"], name="accounting__company_3e9b44_idx"),
                    models.Index(fields=["company", "source_document", "source_reference"], name="accounting__company_c20d7a_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "voucher_number"), name="uniq_voucher_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("payee_id", models.CharField(blank=True, default="", max_length=64)),
                ("debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="accounting.account")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="journal_lines", to="accounts.company")),
                ("voucher", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="accounting.journalvoucher")),
            ],
            options={
                "ordering": ["voucher", "line_no"],
                "indexes": [
                    models.Index(fields=["company", "account"], name="accounting__company_f41b90_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("voucher", "line_no"), name="uniq_voucher_line_no"),
                    models.CheckConstraint(condition=models.Q(("debit__gt", 0), ("credit__gt", 0), _negated=True), name="chk_line_not_both_debit_credit"),
                    models.CheckConstraint(condition=models.Q(("debit__exact", 0), ("credit__exact", 0), _negated=True), name="chk_line_not_both_zero"),
                    models.CheckConstraint(condition=models.Q(("debit__gte", 0), ("credit__gte", 0)), name="chk_line_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditTrailEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("target_type", models.CharField(choices=[("JOURNAL_VOUCHER", "Journal voucher"), ("PAYMENT_VOUCHER", "Payment voucher"), ("GOODS_RECEIVED_NOTE", "Goods received note")], max_length=30)),
                ("target_id", models.CharField(max_length=64)),
                ("position", models.PositiveIntegerField()),
                ("user_label", models.CharField(blank=True, default="", max_length=255)),
                ("action", models.CharField(max_length=50)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("details", models.JSONField(blank=True, null=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="audit_entries", to="accounts.company")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="audit_entries", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "audit trail entries",
                "ordering": ["target_type", "target_id", "position"],
                "indexes": [
                    models.Index(fields=["company", "target_type", "target_id"], name="accounting__company_07b6e3_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("target_type", "target_id", "position"), name="uniq_audit_target_position"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentVoucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("voucher_number", models.CharField(max_length=50)),
                ("voucher_date", models.DateField()),
                ("payment_type", models.CharField(choices=[("BANK", "Bank"), ("CASH", "Cash"), ("MOBILE", "Mobile"), ("FX", "FX")], max_length=10)),
                ("payment_mode", models.CharField(choices=[("TRANSFER", "Transfer"), ("CHEQUE", "Cheque"), ("CASH", "Cash")], default="TRANSFER", max_length=10)),
                ("currency", models.CharField(max_length=3)),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=Decimal("1.0"), max_digits=18)),
                ("payee_type", models.CharField(choices=[("SUPPLIER", "Supplier"), ("STAFF", "Staff"), ("GOVT", "Government"), ("OTHER", "Other")], max_length=10)),
                ("payee_code", models.CharField(max_length=64)),
                ("payee_name", models.CharField(blank=True, default="", max_length=255)),
                ("narration", models.CharField(max_length=255)),
                ("source_module", models.CharField(blank=True, default="", max_length=50)),
                ("source_document_no", models.CharField(blank=True, default="", max_length=100)),
                ("bank_cash_account_code", models.CharField(max_length=20)),
                ("gross_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("total_vat", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_wht", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("net_payable", models.DecimalField(decimal_places=2, max_digits=18)),
                ("status", models.CharField(choices=[("SUBMITTED", "Submitted"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], default="SUBMITTED", max_length=10)),
                ("approval_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="approved_payment_vouchers", to=settings.AUTH_USER_MODEL)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payment_vouchers", to="accounts.company")),
                ("journal_voucher", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payment_voucher", to="accounting.journalvoucher")),
                ("prepared_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="prepared_payment_vouchers", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-voucher_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "voucher_number"), name="uniq_payment_voucher_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentVoucherLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("gl_account_code", models.CharField(max_length=20)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("cost_center", models.CharField(blank=True, default="", max_length=50)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("vat_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("wht_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("payment_voucher", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="accounting.paymentvoucher")),
            ],
            options={
                "ordering": ["payment_voucher", "line_no"],
            },
        ),
        migrations.CreateModel(
            name="GoodsReceivedNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("grn_number", models.CharField(max_length=50)),
                ("purchase_order_number", models.CharField(max_length=50)),
                ("supplier_name", models.CharField(blank=True, default="", max_length=255)),
                ("received_date", models.DateField()),
                ("total_received_value", models.DecimalField(decimal_places=2, max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="goods_received_notes", to="accounts.company")),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="received_goods", to=settings.AUTH_USER_MODEL)),
                ("journal_voucher", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="goods_received_note", to="accounting.journalvoucher")),
            ],
            options={
                "ordering": ["-received_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "grn_number"), name="uniq_grn_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="GoodsReceivedNoteLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("quantity_received", models.DecimalField(decimal_places=4, max_digits=18)),
                ("unit_cost", models.DecimalField(decimal_places=4, max_digits=18)),
                ("grn", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="accounting.goodsreceivednote")),
            ],
            options={
                "ordering": ["grn", "line_no"],
            },
        ),
    ]
