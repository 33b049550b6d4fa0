import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "method",
                    models.CharField(
                        choices=[("QRIS", "QRIS"), ("TRANSFER", "Bank transfer"), ("CASH", "Cash")],
                        default="QRIS",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Waiting for payment"), ("PAID", "Paid"), ("FAILED", "Failed")],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                (
                    "reference_no",
                    models.CharField(
                        editable=False,
                        help_text="Order id handed to the gateway.",
                        max_length=50,
                        unique=True,
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("proof_url", models.URLField(blank=True, max_length=500)),
                ("snap_token", models.CharField(blank=True, max_length=255)),
                (
                    "gateway_status",
                    models.CharField(
                        blank=True,
                        help_text="Last transaction status reported by the gateway.",
                        max_length=30,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status__in", ["PENDING", "PAID"])),
                        fields=("booking",),
                        name="one_active_payment_per_booking",
                    ),
                ],
            },
        ),
    ]
