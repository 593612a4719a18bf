"""Per-dependency-type constraint arithmetic for the CPM passes.

All dates are inclusive day values. An item occupying ``span`` days that
starts on S finishes on S + span - 1.

Forward rules (earliest start imposed on the successor):
- FS: successor start >= predecessor finish + 1 + lead/lag
- SS: successor start >= predecessor start + lead/lag
- FF: successor finish >= predecessor finish + lead/lag
- SF: successor finish >= predecessor start + lead/lag

Backward rules are the mirror image (latest finish imposed on the predecessor).
"""

from collections.abc import Callable
from datetime import date, timedelta

from lintel.models import DependencyType

# (pred_start, pred_finish, lead_lag_days, successor_span) -> successor earliest start
ForwardRule = Callable[[date, date, int, int], date]
# (succ_ls, succ_lf, lead_lag_days, predecessor_span) -> predecessor latest finish
BackwardRule = Callable[[date, date, int, int], date]


def _days(n: int) -> timedelta:
    return timedelta(days=n)


def _forward_finish_to_start(pred_start: date, pred_finish: date, lag: int, span: int) -> date:
    return pred_finish + _days(1 + lag)


def _forward_start_to_start(pred_start: date, pred_finish: date, lag: int, span: int) -> date:
    return pred_start + _days(lag)


def _forward_finish_to_finish(pred_start: date, pred_finish: date, lag: int, span: int) -> date:
    # Required finish translated back to a start floor via the successor's span
    return pred_finish + _days(lag) - _days(span - 1)


def _forward_start_to_finish(pred_start: date, pred_finish: date, lag: int, span: int) -> date:
    return pred_start + _days(lag) - _days(span - 1)


def _backward_finish_to_start(succ_ls: date, succ_lf: date, lag: int, span: int) -> date:
    return succ_ls - _days(1 + lag)


def _backward_start_to_start(succ_ls: date, succ_lf: date, lag: int, span: int) -> date:
    # Constrains the predecessor's start; shift to its finish
    return succ_ls - _days(lag) + _days(span - 1)


def _backward_finish_to_finish(succ_ls: date, succ_lf: date, lag: int, span: int) -> date:
    return succ_lf - _days(lag)


def _backward_start_to_finish(succ_ls: date, succ_lf: date, lag: int, span: int) -> date:
    return succ_lf - _days(lag) + _days(span - 1)


FORWARD_RULES: dict[DependencyType, ForwardRule] = {
    DependencyType.FINISH_TO_START: _forward_finish_to_start,
    DependencyType.START_TO_START: _forward_start_to_start,
    DependencyType.FINISH_TO_FINISH: _forward_finish_to_finish,
    DependencyType.START_TO_FINISH: _forward_start_to_finish,
}

BACKWARD_RULES: dict[DependencyType, BackwardRule] = {
    DependencyType.FINISH_TO_START: _backward_finish_to_start,
    DependencyType.START_TO_START: _backward_start_to_start,
    DependencyType.FINISH_TO_FINISH: _backward_finish_to_finish,
    DependencyType.START_TO_FINISH: _backward_start_to_finish,
}

# Every dependency type must have both rules
assert set(FORWARD_RULES) == set(DependencyType)
assert set(BACKWARD_RULES) == set(DependencyType)


def forward_constraint(
    dependency_type: DependencyType,
    pred_start: date,
    pred_finish: date,
    lead_lag_days: int,
    successor_span: int,
) -> date:
    """Earliest start a dependency imposes on its successor."""
    return FORWARD_RULES[dependency_type](pred_start, pred_finish, lead_lag_days, successor_span)


def backward_constraint(
    dependency_type: DependencyType,
    succ_latest_start: date,
    succ_latest_finish: date,
    lead_lag_days: int,
    predecessor_span: int,
) -> date:
    """Latest finish a dependency imposes on its predecessor."""
    return BACKWARD_RULES[dependency_type](
        succ_latest_start, succ_latest_finish, lead_lag_days, predecessor_span
    )
