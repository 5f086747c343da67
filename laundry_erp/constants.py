"""
Business constants: roles, shifts, allowance and overtime rates (Rupiah)
"""

# Role constants
ROLE_ADMIN = "admin"
ROLE_GUDANG = "gudang"
ROLE_PRODUKSI = "produksi"
ROLE_KURIR = "kurir"

# Only these roles may annul an attendance record
ANNULMENT_ALLOWED_ROLES = frozenset({ROLE_ADMIN})

# Attendance
ATTENDANCE_IN = "in"
ATTENDANCE_OUT = "out"
ATTENDANCE_ACTIVE = "active"
ATTENDANCE_ANNULLED = "annulled"

ACTION_ATTENDANCE_ANNULLED = "ATTENDANCE_ANNULLED"
ACTION_PAYROLL_SAVED = "PAYROLL_SAVED"
ACTION_COMMISSION_RATE_UPDATED = "COMMISSION_RATE_UPDATED"
ACTION_CASH_ADVANCE_ADDED = "CASH_ADVANCE_ADDED"
ACTION_CASH_ADVANCE_DELETED = "CASH_ADVANCE_DELETED"
ACTION_PRODUCTION_EDITED = "PRODUCTION_EDITED"
ACTION_PRODUCTION_VERIFIED = "PRODUCTION_VERIFIED"
ACTION_PRODUCTION_UNVERIFIED = "PRODUCTION_UNVERIFIED"

# Shift start times, local civil time (hour, minute)
SHIFT_PAGI = "pagi"
SHIFT_SORE = "sore"
SHIFT_CONFIG = {
    SHIFT_PAGI: (7, 0),
    SHIFT_SORE: (14, 0),
}
LATE_TOLERANCE_MINUTES = 15
# A clock-out further than this from the shift's first clock-in is not paired with it
MAX_SHIFT_HOURS = 24

# Allowances
DENDA_PER_LATE = 25000
UANG_TRANSPORT_PER_DAY = 10000
UANG_MAKAN_RATE_JUNIOR = 17000
UANG_MAKAN_RATE_SENIOR = 20000
TENURE_SENIOR_AFTER_MONTHS = 12
TUNJANGAN_JABATAN_FIRST_TIER = 150000
TUNJANGAN_JABATAN_STEP = 100000

# Overtime
JAM_KERJA_NORMAL = 8
LEMBUR_MIN_HOURS = 3
LEMBUR_RATE_PER_HOUR = 7000
DEFAULT_LEMBUR_JAM_RATE = 7000
DEFAULT_LEMBUR_LIBUR_RATE = 35000

# Production processes
VALID_PROCESSES = ("cuci", "kering", "setrika", "packing", "cuci_sepatu", "cuci_satuan")
WEIGHT_OPTIONAL_PROCESSES = ("cuci_satuan", "cuci_sepatu")
PROCESS_REQUIRING_SERVICE_PRICE = "cuci_satuan"

# Production audit
PRODUCTION_VERIFIED = "verified"
PRODUCTION_UNVERIFIED = "unverified"
