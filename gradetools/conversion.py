"""Letter grade, grade point and final percent conversion."""

import math
from typing import Any, Dict, List, Tuple, Union

from gradetools.models import NOT_FOUND, NotFound

AVAILABLE_GRADES: List[str] = ["A+", "A", "B+", "B", "C+", "C", "D+", "D", "F"]

GRADE_TO_GPA: Dict[str, float] = {
    "A+": 4.5,
    "A": 4.0,
    "B+": 3.5,
    "B": 3.0,
    "C+": 2.5,
    "C": 2.0,
    "D+": 1.5,
    "D": 1.0,
    "F": 0.0,
}

GRADE_TO_FINAL_PERCENT: Dict[str, int] = {
    "A+": 90,
    "A": 80,
    "B+": 70,
    "B": 60,
    "C+": 50,
    "C": 40,
    "D+": 30,
    "D": 20,
    "F": 10,
}

# (lower bound, grade), highest first. Lower bounds are inclusive and the
# top band has no upper limit.
PERCENT_BANDS: Tuple[Tuple[float, str], ...] = (
    (85.0, "A+"),
    (75.0, "A"),
    (65.0, "B+"),
    (55.0, "B"),
    (45.0, "C+"),
    (35.0, "C"),
    (25.0, "D+"),
    (15.0, "D"),
    (0.0, "F"),
)


def _normalize_grade(grade: Any) -> str:
    if grade is None:
        return ""
    return str(grade).strip()


def grade_to_gpa(grade: Any) -> Union[float, NotFound]:
    return GRADE_TO_GPA.get(_normalize_grade(grade), NOT_FOUND)


def grade_to_final_percent(grade: Any) -> Union[int, NotFound]:
    return GRADE_TO_FINAL_PERCENT.get(_normalize_grade(grade), NOT_FOUND)


def _to_percent(value: Any) -> Union[float, NotFound]:
    if isinstance(value, bool) or value is None:
        return NOT_FOUND
    try:
        number = float(str(value).strip().rstrip("%"))
    except ValueError:
        return NOT_FOUND
    if math.isnan(number) or math.isinf(number):
        return NOT_FOUND
    return round(number, 2)


def percent_to_grade(percent: Any) -> Union[str, NotFound]:
    """Resolve a final percent to the letter grade of its band.

    The value is rounded to two decimals first so that e.g. 84.999 lands
    in the A+ band rather than just under it.
    """
    value = _to_percent(percent)
    if value is NOT_FOUND or value < 0:
        return NOT_FOUND
    for low, grade in PERCENT_BANDS:
        if value >= low:
            return grade
    return NOT_FOUND
