"""
Service-wide constants
"""

SERVICE_NAME = "careflow-hr-backend"

# Audit actions
AUDIT_SUBMIT_LEAVE_REQUEST = "SUBMIT_LEAVE_REQUEST"
AUDIT_CREATE = "CREATE"
AUDIT_UPDATE = "UPDATE"

# Actor recorded for writes made by the system itself (webhooks, sweeps)
SYSTEM_ACTOR = "system"
