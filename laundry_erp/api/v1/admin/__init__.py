"""Admin API (admin role only)."""
from fastapi import APIRouter
from laundry_erp.api.v1.admin import attendance as admin_attendance
from laundry_erp.api.v1.admin import commission as admin_commission
from laundry_erp.api.v1.admin import kasbon as admin_kasbon
from laundry_erp.api.v1.admin import payroll as admin_payroll
from laundry_erp.api.v1.admin import production as admin_production

admin_router = APIRouter(prefix="/admin", tags=["admin"])
admin_router.include_router(admin_attendance.router, prefix="/attendance", tags=["admin-attendance"])
admin_router.include_router(admin_commission.router, prefix="/commission", tags=["admin-commission"])
admin_router.include_router(admin_kasbon.router, prefix="/kasbon", tags=["admin-kasbon"])
admin_router.include_router(admin_payroll.router, prefix="/payroll", tags=["admin-payroll"])
admin_router.include_router(admin_production.router, prefix="/production", tags=["admin-production"])
