from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from src.models.entities import TargetRecord
from src.shared.time import PeriodWindow


def achievement_percentage(achieved: float, target_amount: Optional[float]) -> float:
    if not target_amount or target_amount <= 0:
        return 0.0
    return achieved / target_amount * 100


def find_current_target(
    targets: Iterable[TargetRecord], target_type: str, as_of: date
) -> Optional[TargetRecord]:
    for target in targets:
        if target.target_type == target_type and target.start_date <= as_of <= target.end_date:
            return target
    return None


def first_of_type(targets: Iterable[TargetRecord], target_type: str) -> Optional[TargetRecord]:
    return next((target for target in targets if target.target_type == target_type), None)


def targets_intersecting(targets: Iterable[TargetRecord], window: PeriodWindow) -> List[TargetRecord]:
    matches = [
        target
        for target in targets
        if target.start_date <= window.end_date and target.end_date >= window.start_date
    ]
    return sorted(matches, key=lambda target: target.start_date, reverse=True)


def targets_within(targets: Iterable[TargetRecord], window: PeriodWindow) -> List[TargetRecord]:
    return [
        target
        for target in targets
        if target.start_date >= window.start_date and target.end_date <= window.end_date
    ]


def sum_amounts(targets: Iterable[TargetRecord]) -> float:
    return sum(target.amount for target in targets)
