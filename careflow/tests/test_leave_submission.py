"""
Tests for leave request submission (POST /api/v1/leaves/process)
"""
from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from fastapi import status
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from careflow.core.constants import AUDIT_SUBMIT_LEAVE_REQUEST
from careflow.core.errors import DependencyError
from careflow.models.audit_log import AuditLog
from careflow.models.leave import LeaveApprovalRule, LeaveRequest
from careflow.services import leave_service

URL = "/api/v1/leaves/process"


@pytest.fixture
def default_rules(db: Session):
    """The default sick/annual rule set"""
    rules = [
        LeaveApprovalRule(name="Auto-approve Short Sick Leave", leave_type="sick",
                          min_duration_days=0, max_duration_days=2, auto_approve=True, priority=10),
        LeaveApprovalRule(name="Manager Review for Long Sick Leave", leave_type="sick",
                          min_duration_days=3, max_duration_days=365, requires_manager_approval=True,
                          priority=20),
        LeaveApprovalRule(name="Standard Annual Leave Review", leave_type="annual",
                          max_duration_days=30, requires_manager_approval=True, priority=50),
        LeaveApprovalRule(name="Inactive catch-all", action="rejected", is_active=False, priority=1),
    ]
    db.add_all(rules)
    db.commit()
    return rules


def leave_body(employee_id, leave_type="sick", days=2, offset=7, **extra):
    start = date.today() + timedelta(days=offset)
    end = start + timedelta(days=days - 1)
    body = {
        "employee_id": employee_id,
        "leave_type": leave_type,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "reason": "Unwell",
    }
    body.update(extra)
    return {"leaveRequest": body}


def test_short_sick_leave_auto_approved(client, db, auth_headers, employee, default_rules):
    response = client.post(URL, json=leave_body(employee.id, days=2), headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "approved"
    assert data["ruleApplied"] == "Auto-approve Short Sick Leave"
    assert data["data"]["total_days"] == 2
    assert data["data"]["status"] == "approved"
    assert data["data"]["requested_by"] == "user-123"
    assert data["data"]["requested_at"].endswith("Z")

    stored = db.query(LeaveRequest).one()
    assert stored.status == "approved"


def test_long_sick_leave_matches_review_rule(client, auth_headers, employee, default_rules):
    response = client.post(URL, json=leave_body(employee.id, days=5), headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "pending"
    assert data["ruleApplied"] == "Manager Review for Long Sick Leave"


def test_no_rules_defaults_to_pending(client, auth_headers, employee):
    response = client.post(URL, json=leave_body(employee.id, leave_type="compassionate"), headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "pending"
    assert data["ruleApplied"] is None


def test_inactive_rules_are_ignored(client, auth_headers, employee, default_rules):
    response = client.post(URL, json=leave_body(employee.id, leave_type="unpaid"), headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "pending"


def test_total_days_is_recomputed(client, auth_headers, employee, default_rules):
    body = leave_body(employee.id, days=1, total_days=40)

    response = client.post(URL, json=body, headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["total_days"] == 1
    assert response.json()["status"] == "approved"


def test_submission_is_audited(client, db, auth_headers, employee, default_rules):
    response = client.post(URL, json=leave_body(employee.id, days=1), headers=auth_headers)
    leave_id = response.json()["data"]["id"]

    audit = db.query(AuditLog).filter(AuditLog.action == AUDIT_SUBMIT_LEAVE_REQUEST).one()
    assert audit.entity_type == "leave_requests"
    assert audit.entity_id == leave_id
    assert audit.actor_id == "user-123"
    assert audit.details == "Status: approved, Rule: Auto-approve Short Sick Leave"
    assert audit.meta_json["rule_applied"] == "Auto-approve Short Sick Leave"


def test_audit_without_rule_has_status_only(client, db, auth_headers, employee):
    client.post(URL, json=leave_body(employee.id), headers=auth_headers)

    audit = db.query(AuditLog).one()
    assert audit.details == "Status: pending"


def test_missing_token_returns_401(client, employee):
    response = client.post(URL, json=leave_body(employee.id))

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["code"] == "AUTH_FAILED"


def test_invalid_token_returns_401(client, employee):
    response = client.post(
        URL,
        json=leave_body(employee.id),
        headers={"Authorization": "Bearer not-a-real-token"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["message"] == "Invalid token"


def test_end_before_start_returns_400(client, db, auth_headers, employee):
    body = leave_body(employee.id)
    body["leaveRequest"]["end_date"] = (date.today() - timedelta(days=30)).isoformat()

    response = client.post(URL, json=body, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "end_date must be on or after start_date" in response.json()["error"]["message"]
    assert db.query(LeaveRequest).count() == 0


def test_missing_leave_request_returns_400(client, auth_headers):
    response = client.post(URL, json={"employee_id": 1}, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["message"].startswith("Invalid leave request")


def test_non_json_body_returns_400(client, auth_headers):
    response = client.post(
        URL,
        content=b"not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": {"message": "Request body must be valid JSON"}}


def test_insert_failure_returns_400_and_writes_nothing(client, db, auth_headers):
    # No employee with this id: the foreign key rejects the insert
    response = client.post(URL, json=leave_body(9999), headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Failed to insert leave request" in response.json()["error"]["message"]
    assert db.query(LeaveRequest).count() == 0
    assert db.query(AuditLog).count() == 0


def test_rule_fetch_failure_aborts_submission(client, db, auth_headers, employee, monkeypatch):
    def broken_rules(session):
        raise DependencyError("Failed to fetch leave approval rules: connection refused")

    monkeypatch.setattr(leave_service, "list_active_rules", broken_rules)

    response = client.post(URL, json=leave_body(employee.id), headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Failed to fetch leave approval rules" in response.json()["error"]["message"]
    assert db.query(LeaveRequest).count() == 0


def test_audit_failure_does_not_fail_submission(client, db, auth_headers, employee, default_rules, monkeypatch):
    def broken_audit(**kwargs):
        raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk full"))

    monkeypatch.setattr(leave_service, "log_audit", broken_audit)

    response = client.post(URL, json=leave_body(employee.id, days=1), headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "approved"
    assert db.query(LeaveRequest).count() == 1


def test_rule_with_invalid_action_returns_400(client, db, auth_headers, employee, monkeypatch):
    legacy = SimpleNamespace(id=1, name="Legacy", priority=1, leave_type=None,
                             max_duration_days=None, auto_approve=False, action="auto_approve")
    monkeypatch.setattr(leave_service, "list_active_rules", lambda session: [legacy])

    response = client.post(URL, json=leave_body(employee.id), headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Legacy" in response.json()["error"]["message"]
    assert db.query(LeaveRequest).count() == 0


def test_store_rejects_unknown_rule_action(db):
    db.add(LeaveApprovalRule(name="Legacy", action="auto_approve", priority=1))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
