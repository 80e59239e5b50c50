"""Core constants: dashboard collections and bootstrap accounts.

Maps every DashboardSnapshot field to the store collection it mirrors.
"""

from schoolsync.infrastructure.store.collections import (
    COLLECTION_ADMISSION_APPLICATIONS,
    COLLECTION_ADMISSIONS,
    COLLECTION_FEES,
    COLLECTION_HOMEWORKS,
    COLLECTION_HOSTEL_FEES,
    COLLECTION_HOSTEL_ROOMS,
    COLLECTION_HOSTELS,
    COLLECTION_JOB_APPLICATIONS,
    COLLECTION_NOTICES,
    COLLECTION_STUDENT_ATTENDANCE,
    COLLECTION_STUDENTS,
    COLLECTION_TEACHERS,
    COLLECTION_USERS,
)

# Snapshot field name -> store collection
DASHBOARD_COLLECTIONS: dict[str, str] = {
    "students": COLLECTION_STUDENTS,
    "teachers": COLLECTION_TEACHERS,
    "fees": COLLECTION_FEES,
    "hostel_fees": COLLECTION_HOSTEL_FEES,
    "student_attendance": COLLECTION_STUDENT_ATTENDANCE,
    "hostels": COLLECTION_HOSTELS,
    "hostel_rooms": COLLECTION_HOSTEL_ROOMS,
    "homeworks": COLLECTION_HOMEWORKS,
    "admissions": COLLECTION_ADMISSIONS,
    "admission_applications": COLLECTION_ADMISSION_APPLICATIONS,
    "job_applications": COLLECTION_JOB_APPLICATIONS,
    "users": COLLECTION_USERS,
    "notices": COLLECTION_NOTICES,
}

# (user_id, role) pairs seeded into COLLECTION_USERS when no account holds the role
DEFAULT_ACCOUNTS: tuple[tuple[str, str], ...] = (
    ("admin", "Admin"),
    ("finance", "Finance"),
)
