"""
Database models
"""
from careflow.models.employee import Employee, EmployeeStatus
from careflow.models.audit_log import AuditLog
from careflow.models.leave import LeaveApprovalRule, LeaveRequest, LeaveStatus
from careflow.models.role_mapping import RoleMapping
from careflow.models.failed_sync import FailedSync, FailedSyncStatus

__all__ = [
    "Employee",
    "EmployeeStatus",
    "AuditLog",
    "LeaveApprovalRule",
    "LeaveRequest",
    "LeaveStatus",
    "RoleMapping",
    "FailedSync",
    "FailedSyncStatus",
]
