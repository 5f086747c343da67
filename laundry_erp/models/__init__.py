"""
Database models
"""
from laundry_erp.models.employee import Employee, Role
from laundry_erp.models.audit_log import AuditLog
from laundry_erp.models.attendance import AttendanceLog
from laundry_erp.models.production import ProductionEntry, ProductionEditHistory
from laundry_erp.models.commission import CommissionRate
from laundry_erp.models.payroll import PayrollPeriod
from laundry_erp.models.cash_advance import CashAdvance

__all__ = [
    "Employee",
    "Role",
    "AuditLog",
    "AttendanceLog",
    "ProductionEntry",
    "ProductionEditHistory",
    "CommissionRate",
    "PayrollPeriod",
    "CashAdvance",
]
