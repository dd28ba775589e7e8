"""Payroll record payloads; gross and net are sums of the entered figures."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field, model_validator

from .common import ApiModel

PaymentStatus = Literal["pending", "paid", "cancelled"]
PaymentMethod = Literal["bank_transfer", "cash", "check", "other"]


class LineItem(ApiModel):
    description: str = ""
    amount: float = Field(..., ge=0)


class Overtime(ApiModel):
    hours: float = Field(default=0, ge=0)
    rate: float = Field(default=0, ge=0)
    amount: float = Field(default=0, ge=0)


class PaymentCreate(ApiModel):
    employee_id: int
    week_start_date: date
    week_end_date: date
    basic_salary: float = Field(..., gt=0)
    overtime: Overtime = Field(default_factory=Overtime)
    bonuses: list[LineItem] = Field(default_factory=list)
    deductions: list[LineItem] = Field(default_factory=list)
    payment_method: PaymentMethod = "bank_transfer"
    payment_status: PaymentStatus = "pending"
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_period(self) -> "PaymentCreate":
        if self.week_end_date < self.week_start_date:
            raise ValueError("weekEndDate must not be before weekStartDate")
        return self


class PaymentUpdate(ApiModel):
    week_start_date: Optional[date] = None
    week_end_date: Optional[date] = None
    basic_salary: Optional[float] = Field(default=None, gt=0)
    overtime: Optional[Overtime] = None
    bonuses: Optional[list[LineItem]] = None
    deductions: Optional[list[LineItem]] = None
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class PaymentOut(ApiModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    week_start_date: str
    week_end_date: str
    pay_period: str
    basic_salary: float
    overtime: Overtime
    bonuses: list[LineItem] = Field(default_factory=list)
    deductions: list[LineItem] = Field(default_factory=list)
    gross_pay: float
    net_pay: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_date: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str


class PaymentStats(ApiModel):
    total_records: int = 0
    pending_count: int = 0
    paid_count: int = 0
    cancelled_count: int = 0
    total_paid: float = 0
    total_pending: float = 0


class PaymentSummary(ApiModel):
    total_payments: int = 0
    paid_payments: int = 0
    pending_payments: int = 0
    total_paid_amount: float = 0
    total_pending_amount: float = 0
