"""
Employee synchronisation from the external HR system

Payloads are validated first; only a valid payload with a known action
touches the database. Employees are keyed by the external employee id, so
replaying a payload updates the same row.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from careflow.core.errors import DependencyError, SyncValidationError, UnknownSyncActionError
from careflow.models.employee import Employee, EmployeeStatus
from careflow.schemas.employee import EmployeeOut
from careflow.schemas.sync import SyncAction, SyncPayload, SyncResult
from careflow.services.role_mapping_service import RoleMappingCache
from careflow.services.sync_hooks import EmployeeLifecycleHooks
from careflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

DEFAULT_COMPLIANCE_STATUS = "Pending"

_default_hooks = EmployeeLifecycleHooks()


def parse_sync_payload(raw: Any) -> SyncPayload:
    """
    Validate a raw webhook payload.

    Raises:
        SyncValidationError: payload does not match the schema
    """
    if isinstance(raw, SyncPayload):
        return raw
    try:
        return SyncPayload.model_validate(raw)
    except ValidationError as e:
        raise SyncValidationError(f"Invalid payload: {e}")


def split_full_name(full_name: str) -> Tuple[str, str]:
    """'Jane Mary Doe' -> ('Jane', 'Mary Doe'); 'Cher' -> ('Cher', '')"""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def map_status(external_status: str) -> EmployeeStatus:
    return EmployeeStatus.ACTIVE if external_status == "Active" else EmployeeStatus.INACTIVE


def map_employee(payload: SyncPayload, internal_role: str, now: datetime) -> Dict[str, Any]:
    """Column values for the employees table."""
    employee = payload.employee
    first_name, last_name = split_full_name(employee.full_name)
    compliance = employee.compliance

    return {
        "tenant_id": payload.tenant_id,
        "external_employee_id": employee.id,
        "first_name": first_name,
        "last_name": last_name,
        "email": str(employee.email),
        "phone": employee.phone,
        "role": internal_role,
        "status": map_status(employee.status).value,
        "right_to_work_status": (compliance and compliance.right_to_work_status) or DEFAULT_COMPLIANCE_STATUS,
        "right_to_work_expiry": compliance.right_to_work_expiry if compliance else None,
        "dbs_status": (compliance and compliance.dbs_status) or DEFAULT_COMPLIANCE_STATUS,
        "dbs_expiry": compliance.dbs_expiry if compliance else None,
        "dbs_number": compliance.dbs_number if compliance else None,
        "compliance_data": compliance.model_dump(exclude_none=True) if compliance else {},
        "updated_at": now,
    }


def get_employee_by_external_id(db: Session, external_employee_id: int) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.external_employee_id == external_employee_id).first()


def upsert_employee(db: Session, values: Dict[str, Any]) -> Tuple[Employee, bool]:
    """
    Insert or update the employee keyed by external_employee_id.

    Returns:
        (employee, created)
    """
    external_id = values["external_employee_id"]
    employee = get_employee_by_external_id(db, external_id)
    if employee is not None:
        for field, value in values.items():
            setattr(employee, field, value)
        db.commit()
        db.refresh(employee)
        return employee, False

    employee = Employee(**values)
    db.add(employee)
    try:
        db.commit()
    except IntegrityError:
        # Another sync for the same external id inserted first
        db.rollback()
        employee = get_employee_by_external_id(db, external_id)
        if employee is None:
            raise
        for field, value in values.items():
            setattr(employee, field, value)
        db.commit()
        db.refresh(employee)
        return employee, False

    db.refresh(employee)
    return employee, True


def deactivate_employee(db: Session, external_employee_id: int, now: datetime) -> bool:
    """Soft delete. Returns False when no employee has that external id."""
    updated = (
        db.query(Employee)
        .filter(Employee.external_employee_id == external_employee_id)
        .update(
            {Employee.status: EmployeeStatus.INACTIVE.value, Employee.updated_at: now},
            synchronize_session="fetch",
        )
    )
    db.commit()
    return updated > 0


def handle_sync(
    db: Session,
    raw_payload: Any,
    cache: RoleMappingCache,
    hooks: Optional[EmployeeLifecycleHooks] = None,
    now: Optional[datetime] = None,
) -> SyncResult:
    """
    Apply one employee sync payload.

    Raises:
        SyncValidationError: invalid payload (nothing written)
        UnknownSyncActionError: action is not employee.created/updated/deleted
        DependencyError: the database rejected the write
    """
    payload = parse_sync_payload(raw_payload)
    hooks = hooks or _default_hooks
    now = now or now_utc()
    external_id = payload.employee.id

    logger.info(
        "Received sync request: %s for employee %s in tenant %s",
        payload.action, external_id, payload.tenant_id,
    )

    try:
        action = SyncAction(payload.action)
    except ValueError:
        raise UnknownSyncActionError(payload.action)

    try:
        if action == SyncAction.EMPLOYEE_DELETED:
            found = deactivate_employee(db, external_id, now)
            if found:
                hooks.on_employee_deleted(external_id)
            else:
                logger.warning("Deactivation requested for unknown employee %s", external_id)
            return SyncResult(
                message="Employee deactivated",
                action=action,
                external_employee_id=external_id,
            )

        internal_role = cache.map_role(db, payload.employee.role, now)
        values = map_employee(payload, internal_role, now)
        employee, created = upsert_employee(db, values)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Sync of employee %s failed: %s", external_id, e)
        raise DependencyError(f"Failed to sync employee {external_id}: {e.__class__.__name__}")

    if action == SyncAction.EMPLOYEE_CREATED:
        hooks.on_employee_created(employee)
    else:
        hooks.on_employee_updated(employee)

    return SyncResult(
        message="Employee synced",
        action=action,
        external_employee_id=external_id,
        created=created,
        data=EmployeeOut.model_validate(employee).model_dump(mode="json"),
    )
