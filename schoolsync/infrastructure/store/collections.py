"""Store collection names (schema-in-code).

Use these constants so collection names stay consistent between the
mirrors, the bootstrap and any caller writing through the sync layer.

Example:
    from schoolsync.infrastructure.store.collections import COLLECTION_STUDENTS

    async with CollectionSync(connection, channel, COLLECTION_STUDENTS) as students:
        ...
"""

# People
COLLECTION_STUDENTS = "students"
COLLECTION_TEACHERS = "teachers"
COLLECTION_USERS = "users"

# Finance
COLLECTION_FEES = "fees"
COLLECTION_HOSTEL_FEES = "hostel_fees"

# Academics
COLLECTION_STUDENT_ATTENDANCE = "student_attendance"
COLLECTION_HOMEWORKS = "homeworks"
COLLECTION_NOTICES = "notices"

# Hostel
COLLECTION_HOSTELS = "hostels"
COLLECTION_HOSTEL_ROOMS = "hostel_rooms"

# Admissions & recruiting
COLLECTION_ADMISSIONS = "admissions"
COLLECTION_ADMISSION_APPLICATIONS = "admission_applications"
COLLECTION_JOB_APPLICATIONS = "job_applications"
