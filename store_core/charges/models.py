# store_core/charges/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from store_core.common.models import StoreScopedModel, TimeStampedModel


class ChargeCategory(models.TextChoices):
    PERSONNEL = "PERSONNEL", "Personnel"
    WATER = "WATER", "Water"
    ELECTRICITY = "ELECTRICITY", "Electricity"
    WIFI = "WIFI", "WiFi"


class ChargePeriod(models.TextChoices):
    MONTH = "MONTH", "Month"
    WEEK = "WEEK", "Week"


class TrendDirection(models.TextChoices):
    UP = "UP", "Up"
    DOWN = "DOWN", "Down"
    STABLE = "STABLE", "Stable"


class EmployeeType(models.TextChoices):
    SERVER = "SERVER", "Server"
    BARISTA = "BARISTA", "Barista"
    KITCHEN = "KITCHEN", "Kitchen"
    CLEANER = "CLEANER", "Cleaner"
    MANAGER = "MANAGER", "Manager"
    OTHER = "OTHER", "Other"


class SalaryByPeriod(models.TextChoices):
    MONTH = "MONTH", "Month"
    WEEK = "WEEK", "Week"


class FixedCharge(StoreScopedModel):
    """
    Recurring cost tied to a month (or to one week of a month for personnel).
    Trend fields compare against the most recent earlier charge of the same
    category and period; they are recomputed on every create/update.
    """
    category = models.CharField(max_length=32, choices=ChargeCategory.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    period = models.CharField(max_length=8, choices=ChargePeriod.choices, default=ChargePeriod.MONTH)

    month_key = models.CharField(max_length=7)  # YYYY-MM
    week_key = models.CharField(max_length=10, blank=True, default="")  # Monday, YYYY-MM-DD (WEEK only)

    trend = models.CharField(max_length=8, choices=TrendDirection.choices, null=True, blank=True)
    trend_percentage = models.DecimalField(max_digits=9, decimal_places=2, null=True, blank=True)
    previous_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    abnormal_increase = models.BooleanField(default=False)

    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "charges_fixed_charge"
        indexes = [
            models.Index(fields=["store_id", "month_key"]),
            models.Index(fields=["store_id", "month_key", "week_key"]),
            models.Index(fields=["store_id", "category", "month_key", "period"]),
        ]

    def __str__(self) -> str:
        key = self.week_key or self.month_key
        return f"{self.category} {key} {self.amount}"


class Employee(StoreScopedModel):
    """
    Master employee record, reused across personnel charges.
    """
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=16, choices=EmployeeType.choices, default=EmployeeType.SERVER)
    position = models.CharField(max_length=128, blank=True, default="")
    start_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "charges_employee"
        constraints = [
            models.UniqueConstraint(
                fields=["store_id", "name", "type", "start_date"],
                name="uq_employee_store_name_type_start",
            )
        ]
        indexes = [
            models.Index(fields=["store_id", "type"]),
            models.Index(fields=["store_id", "name", "type"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


class PersonnelEmployee(TimeStampedModel):
    """
    One employee's line on a personnel charge.

    salary          the figure last entered (month amount, or the week's amount)
    month_salary    sum of this line's week rows for the charge's month
    """
    fixed_charge = models.ForeignKey(FixedCharge, on_delete=models.CASCADE, related_name="employees")
    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name="charge_lines")

    salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    month_salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    salary_by_period = models.CharField(max_length=8, choices=SalaryByPeriod.choices, null=True, blank=True)
    hours = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = "charges_personnel_employee"
        indexes = [
            models.Index(fields=["fixed_charge"]),
            models.Index(fields=["employee"]),
        ]


class PersonnelWeekSalary(TimeStampedModel):
    """
    Ledger row: what one line item costs for one week.
    Rows are never edited in place; they are deleted and recreated.
    """
    personnel_employee = models.ForeignKey(
        PersonnelEmployee, on_delete=models.CASCADE, related_name="week_salaries"
    )
    week_key = models.CharField(max_length=10)  # Monday, YYYY-MM-DD
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    month_key = models.CharField(max_length=7)  # month of week_key's Monday

    class Meta:
        db_table = "charges_personnel_week_salary"
        constraints = [
            models.UniqueConstraint(
                fields=["personnel_employee", "week_key"],
                name="uq_personnel_week_salary_week",
            )
        ]
        indexes = [
            models.Index(fields=["personnel_employee", "month_key"]),
        ]


class VariableCharge(StoreScopedModel):
    """
    A one-off dated cost (purchase, repair...). Never prorated.
    """
    name = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField(db_index=True)

    category = models.CharField(max_length=64, blank=True, default="")
    supplier = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    purchase_order_url = models.URLField(max_length=1024, blank=True, default="")

    class Meta:
        db_table = "charges_variable_charge"
        indexes = [
            models.Index(fields=["store_id", "date"]),
            models.Index(fields=["store_id", "category"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} {self.date} {self.amount}"
