"""
Leave approval rule evaluation

Pure functions: no database access. The caller supplies the active rules.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from careflow.core.errors import DependencyError
from careflow.models.leave import LeaveStatus


@dataclass(frozen=True)
class LeaveFacts:
    """The parts of a leave request the rules look at"""
    leave_type: str
    total_days: int
    days_notice: Optional[int] = None  # carried for notice-based criteria; not evaluated yet


@dataclass(frozen=True)
class RuleDecision:
    status: LeaveStatus
    rule_name: Optional[str] = None
    rule_id: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.rule_name is not None


def rule_action(rule: Any) -> LeaveStatus:
    """
    Disposition a matching rule assigns.

    An explicit `action` wins; otherwise auto_approve rules approve and the
    rest leave the request pending.

    Raises:
        DependencyError: the stored action is not a leave status
    """
    action = getattr(rule, "action", None)
    if action:
        try:
            return LeaveStatus(action.value if isinstance(action, LeaveStatus) else action)
        except ValueError:
            raise DependencyError(
                f"Leave approval rule '{getattr(rule, 'name', None)}' has invalid action '{action}'"
            )
    if getattr(rule, "auto_approve", False):
        return LeaveStatus.APPROVED
    return LeaveStatus.PENDING


def rule_matches(rule: Any, facts: LeaveFacts) -> bool:
    """All specified criteria must hold. Unset, zero or empty criteria are ignored."""
    max_days = getattr(rule, "max_duration_days", None)
    if max_days and facts.total_days > max_days:
        return False

    leave_type = getattr(rule, "leave_type", None)
    if leave_type and facts.leave_type != leave_type:
        return False

    return True


def evaluate_leave_rules(facts: LeaveFacts, rules: Iterable[Any]) -> RuleDecision:
    """
    Return the decision of the first matching rule in ascending priority order.

    sorted() is stable, so rules sharing a priority keep the order they were
    supplied in (the store orders ties by id). No match -> pending.
    """
    ordered = sorted(rules, key=lambda r: r.priority)
    for rule in ordered:
        if rule_matches(rule, facts):
            return RuleDecision(
                status=rule_action(rule),
                rule_name=rule.name,
                rule_id=getattr(rule, "id", None),
            )
    return RuleDecision(status=LeaveStatus.PENDING)
