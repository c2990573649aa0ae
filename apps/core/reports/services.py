from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from apps.core.attendance.services import todays_attendance_rate
from apps.core.exams.services import RankedStudent, top_students
from apps.core.fees.services import TrendPoint, income_trend, total_paid
from apps.core.records import ActivityLog, GradeLevel
from apps.core.students.services import grade_distribution


@dataclass(frozen=True)
class DashboardSummary:
    total_students: int
    total_collected: float
    attendance_rate: int
    grade_distribution: Dict[GradeLevel, int]
    income_trend: List[TrendPoint]
    top_students: List[RankedStudent]
    recent_activity: List[ActivityLog]
    announcement: str


def dashboard_summary(snapshot, today) -> DashboardSummary:
    """Headline numbers and chart series for the dashboard, from one repository snapshot."""
    return DashboardSummary(
        total_students=len(snapshot.students),
        total_collected=total_paid(snapshot.fees),
        attendance_rate=todays_attendance_rate(snapshot.attendance, today),
        grade_distribution=grade_distribution(snapshot.students),
        income_trend=income_trend(snapshot.fees),
        top_students=top_students(snapshot.grades, snapshot.students),
        recent_activity=list(snapshot.activities),
        announcement=snapshot.announcement,
    )
