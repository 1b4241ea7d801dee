"""
Seed the default leave approval rules.

If any rules already exist they are listed and left unchanged.
Run from the repository root with .env loaded.

Usage:
  python scripts/seed_leave_rules.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from careflow.core.constants import SYSTEM_ACTOR
from careflow.db.session import SessionLocal
from careflow.schemas.leave import LeaveApprovalRuleCreate
from careflow.services.leave_rule_service import create_rule, list_rules

DEFAULT_RULES = [
    LeaveApprovalRuleCreate(
        name="Auto-approve Short Sick Leave",
        description="Automatically approve sick leave requests of less than 3 days",
        leave_type="sick",
        min_duration_days=0,
        max_duration_days=2,
        requires_manager_approval=False,
        auto_approve=True,
        priority=10,
    ),
    LeaveApprovalRuleCreate(
        name="Manager Review for Long Sick Leave",
        description="Require manager approval for sick leave of 3 days or more",
        leave_type="sick",
        min_duration_days=3,
        max_duration_days=365,
        requires_manager_approval=True,
        auto_approve=False,
        priority=20,
    ),
    LeaveApprovalRuleCreate(
        name="Auto-approve Annual Leave (Advance Notice)",
        description="Automatically approve annual leave if requested 14 days in advance",
        leave_type="annual",
        min_days_notice=14,
        max_duration_days=10,
        requires_manager_approval=False,
        auto_approve=True,
        priority=10,
    ),
    LeaveApprovalRuleCreate(
        name="Standard Annual Leave Review",
        description="Standard review for annual leave",
        leave_type="annual",
        min_duration_days=0,
        max_duration_days=30,
        requires_manager_approval=True,
        auto_approve=False,
        priority=50,
    ),
]


def main():
    db = SessionLocal()
    try:
        existing = list_rules(db)
        if existing:
            print(f"Found {len(existing)} existing rules:")
            for rule in existing:
                print(f"  - [{rule.priority}] {rule.name} ({rule.leave_type}): {rule.resolved_action}")
            return

        print("No rules found. Inserting default rules...")
        for rule_data in DEFAULT_RULES:
            rule = create_rule(db, rule_data, SYSTEM_ACTOR)
            print(f"  - [NEW] {rule.name}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
