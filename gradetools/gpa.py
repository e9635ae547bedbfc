"""GPA aggregation with credit-hour weighting and course boosts."""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from gradetools.conversion import grade_to_gpa
from gradetools.models import NOT_FOUND, Course

DOUBLE_CREDIT_COURSES = (
    "English 10/American History",
    "English 9/World History",
)
HALF_CREDIT_PATTERN = re.compile(r"^(I Service: |IS: )")
BOOSTED_PATTERN = re.compile(r"^(AP |AT )")

BOOST_MIN_GPA = 1.8
BOOST_VALUE = 0.5


def credit_hours(course_name: str) -> float:
    if course_name in DOUBLE_CREDIT_COURSES:
        return 2
    if HALF_CREDIT_PATTERN.match(course_name or ""):
        return 0.5
    return 1


def course_boost(course_name: str, grade: Any) -> float:
    gpa = grade_to_gpa(grade)
    if gpa is NOT_FOUND or gpa < BOOST_MIN_GPA:
        return 0
    if BOOSTED_PATTERN.match(course_name or ""):
        return BOOST_VALUE
    return 0


def calculate_gpa(courses: Iterable[Course]) -> str:
    """Return the credit-weighted GPA of ``courses`` to two decimals.

    Courses without a recognized grade are left out of both the weighted
    sum and the total weight.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for course in courses:
        gpa = grade_to_gpa(course.grade)
        if gpa is NOT_FOUND:
            continue
        weight = credit_hours(course.name)
        total_weight += weight
        weighted_sum += weight * (gpa + course_boost(course.name, course.grade))
    if total_weight == 0:
        return "0.00"
    # Exact binary value, ties rounded up.
    average = Decimal(weighted_sum / total_weight)
    return str(average.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
