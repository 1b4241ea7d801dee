"""
Tests for the retry sweeper (POST /api/v1/sync/retry-failed)
"""
from fastapi import status
from sqlalchemy.orm import Session

from careflow.core.errors import DependencyError, SyncValidationError
from careflow.models.employee import Employee
from careflow.models.failed_sync import FailedSync, FailedSyncStatus
from careflow.services import retry_service
from careflow.services.retry_service import record_retry_failure, retry_failed_syncs

URL = "/api/v1/sync/retry-failed"


def good_payload(external_id=2001):
    return {
        "action": "employee.created",
        "employee": {
            "id": external_id,
            "full_name": "Sam Carer",
            "email": "sam.carer@carehome.co.uk",
            "role": "Care Worker",
            "status": "Active",
        },
        "tenant_id": 3,
    }


def bad_payload():
    # Still invalid on every retry
    payload = good_payload(2999)
    payload["employee"]["email"] = "not-an-email"
    return payload


def add_failed(db: Session, payload, retries=0, status_value=FailedSyncStatus.PENDING_RETRY.value):
    row = FailedSync(payload=payload, error_message="original failure", retries=retries, status=status_value)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def test_success_resolves_without_touching_retries(db, role_cache):
    row = add_failed(db, good_payload(), retries=1)

    report = retry_failed_syncs(db, role_cache)

    db.refresh(row)
    assert row.status == FailedSyncStatus.RESOLVED.value
    assert row.retries == 1
    assert report.resolved == 1
    assert db.query(Employee).filter(Employee.external_employee_id == 2001).count() == 1


def test_failure_at_ceiling_escalates_to_manual_review(db, role_cache):
    row = add_failed(db, bad_payload(), retries=2)

    report = retry_failed_syncs(db, role_cache)

    db.refresh(row)
    assert row.retries == 3
    assert row.status == FailedSyncStatus.MANUAL_REVIEW_REQUIRED.value
    assert report.escalated == 1


def test_failure_below_ceiling_stays_pending(db, role_cache):
    row = add_failed(db, bad_payload(), retries=0)

    report = retry_failed_syncs(db, role_cache)

    db.refresh(row)
    assert row.retries == 1
    assert row.status == FailedSyncStatus.PENDING_RETRY.value
    assert report.retried == 1


def test_terminal_and_exhausted_rows_are_not_selected(db, role_cache):
    resolved = add_failed(db, good_payload(2002), status_value=FailedSyncStatus.RESOLVED.value)
    manual = add_failed(db, good_payload(2003), retries=3,
                        status_value=FailedSyncStatus.MANUAL_REVIEW_REQUIRED.value)
    exhausted = add_failed(db, good_payload(2004), retries=3)

    report = retry_failed_syncs(db, role_cache)

    assert report.processed == 0
    for row in (resolved, manual, exhausted):
        db.refresh(row)
    assert manual.retries == 3
    assert exhausted.status == FailedSyncStatus.PENDING_RETRY.value
    assert db.query(Employee).count() == 0


def test_rows_are_isolated(db, role_cache):
    failing = add_failed(db, bad_payload(), retries=0)
    succeeding = add_failed(db, good_payload(), retries=0)

    report = retry_failed_syncs(db, role_cache)

    db.refresh(failing)
    db.refresh(succeeding)
    assert report.processed == 2
    assert failing.retries == 1
    assert succeeding.status == FailedSyncStatus.RESOLVED.value


def test_custom_ceiling():
    row = FailedSync(payload={}, error_message="x", retries=4, status="pending_retry")

    assert record_retry_failure(row, max_retries=5) is True
    assert row.status == FailedSyncStatus.MANUAL_REVIEW_REQUIRED.value


def test_endpoint_reports_counts(client, db):
    add_failed(db, good_payload(), retries=0)
    add_failed(db, bad_payload(), retries=2)

    response = client.post(URL)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Retried failed syncs."
    assert data["processed"] == 2
    assert data["resolved"] == 1
    assert data["escalated"] == 1


def test_endpoint_candidate_fetch_failure_returns_500(client, monkeypatch):
    def broken_candidates(session, max_retries=3):
        raise DependencyError("Failed to fetch failed syncs: OperationalError")

    monkeypatch.setattr(retry_service, "get_retry_candidates", broken_candidates)

    response = client.post(URL)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"success": False, "error": "Failed to fetch failed syncs: OperationalError"}


def test_row_deleted_mid_sweep_does_not_stop_the_sweep(db, role_cache, monkeypatch):
    vanishing = add_failed(db, bad_payload(), retries=0)
    succeeding = add_failed(db, good_payload(), retries=0)
    vanishing_id = vanishing.id
    vanishing_payload = vanishing.payload
    real_handle_sync = retry_service.handle_sync

    def handle_sync_deleting_first_row(session, payload, cache, hooks=None):
        if payload == vanishing_payload:
            session.query(FailedSync).filter(FailedSync.id == vanishing_id).delete()
            session.commit()
            raise SyncValidationError("Invalid payload: email")
        return real_handle_sync(session, payload, cache, hooks=hooks)

    monkeypatch.setattr(retry_service, "handle_sync", handle_sync_deleting_first_row)

    report = retry_failed_syncs(db, role_cache)

    db.refresh(succeeding)
    assert report.processed == 2
    assert report.resolved == 1
    assert report.retried == 0
    assert succeeding.status == FailedSyncStatus.RESOLVED.value
    assert db.get(FailedSync, vanishing_id) is None


def test_row_deleted_during_successful_redrive_is_skipped(db, role_cache, monkeypatch):
    row = add_failed(db, good_payload(), retries=0)
    row_id = row.id
    real_handle_sync = retry_service.handle_sync

    def handle_sync_then_delete(session, payload, cache, hooks=None):
        result = real_handle_sync(session, payload, cache, hooks=hooks)
        session.query(FailedSync).filter(FailedSync.id == row_id).delete()
        session.commit()
        return result

    monkeypatch.setattr(retry_service, "handle_sync", handle_sync_then_delete)

    report = retry_failed_syncs(db, role_cache)

    assert report.processed == 1
    assert report.resolved == 0
    assert db.get(FailedSync, row_id) is None
