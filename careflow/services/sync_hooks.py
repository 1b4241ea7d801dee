"""
Employee lifecycle hooks fired after a sync has been applied.

The default implementation only logs. Subclass EmployeeLifecycleHooks to
assign teams/schedules on onboarding or revoke access on offboarding.
"""
import logging

from careflow.models.employee import Employee

logger = logging.getLogger(__name__)


class EmployeeLifecycleHooks:
    def on_employee_created(self, employee: Employee) -> None:
        logger.info(
            "Onboarding: new employee %s (%s) added for tenant %s",
            employee.external_employee_id, employee.role, employee.tenant_id,
        )

    def on_employee_updated(self, employee: Employee) -> None:
        logger.info(
            "Employee update: employee %s (%s) updated, status %s",
            employee.external_employee_id, employee.role, employee.status,
        )

    def on_employee_deleted(self, external_employee_id: int) -> None:
        logger.info("Offboarding: employee %s deactivated", external_employee_id)
