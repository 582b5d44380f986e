"""Closed vocabularies shared by models, schemas and the access guards."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    SUB_SCHOOL_ADMIN = "sub_school_admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"
    ACCOUNTANT = "accountant"
    LIBRARIAN = "librarian"
    TRANSPORT_ADMIN = "transport_admin"
    HOD = "hod"
    ORG_ADMIN = "org_admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    GRADUATED = "graduated"


class ModuleName(str, Enum):
    STUDENT_MANAGEMENT = "student_management"
    TEACHER_MANAGEMENT = "teacher_management"
    CLASS_MANAGEMENT = "class_management"
    ACADEMICS_MANAGEMENT = "academics_management"
    ATTENDANCE_MANAGEMENT = "attendance_management"
    TEST_RESULT_MANAGEMENT = "test_result_management"
    EVENT_MANAGEMENT = "event_management"
    BASIC_ACCOUNTS = "basic_accounts"
    NOTIFICATION_SYSTEM = "notification_system"
    AUDIT_SYSTEM = "audit_system"
    LIBRARY_MANAGEMENT = "library_management"
    TRANSPORT_MANAGEMENT = "transport_management"
    ACCOUNTS_PAYROLL = "accounts_payroll"
    STAFF_MANAGEMENT = "staff_management"
    ADVANCE_NOTIFICATION = "advance_notification"
    BRANCH_MANAGEMENT = "branch_management"


class Permission(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
    INVITE = "invite"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
