"""
Print the most recent dead-lettered employee syncs.

Usage:
  python scripts/check_failed_syncs.py                          # latest 5, any status
  python scripts/check_failed_syncs.py manual_review_required 20
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from careflow.db.session import SessionLocal
from careflow.models.failed_sync import FailedSyncStatus
from careflow.services.dead_letter_service import list_failed_syncs


def main():
    status = FailedSyncStatus(sys.argv[1]) if len(sys.argv) > 1 else None
    limit = int(sys.argv[2]) if len(sys.argv) > 2 else 5

    db = SessionLocal()
    try:
        rows = list_failed_syncs(db, status=status, limit=limit)
        if not rows:
            print("No failed syncs found")
            return
        print(f"Found {len(rows)} failed sync(s):")
        for row in rows:
            employee = (row.payload or {}).get("employee") or {}
            print(f"\n  Sync #{row.id}:")
            print(f"  - Employee ID: {employee.get('id')}")
            print(f"  - Action: {(row.payload or {}).get('action')}")
            print(f"  - Error: {row.error_message}")
            print(f"  - Retries: {row.retries}")
            print(f"  - Status: {row.status}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
