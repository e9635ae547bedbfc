import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Sequence


class NotFound:
    """Result of a lookup that matched nothing.

    Falsy and deliberately not a number, so ``gpa + NOT_FOUND`` raises
    ``TypeError`` instead of producing a wrong average.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = NotFound()


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_int(value: Any, default: int = 0) -> int:
    number = _to_float(value)
    if number is None:
        return default
    return int(number)


class AssignmentStatus(str, Enum):
    COLLECTED = "COLLECTED"
    LATE = "LATE"
    MISSING = "MISSING"
    EXEMPT = "EXEMPT"
    ABSENT = "ABSENT"
    INCOMPLETE = "INCOMPLETE"
    EXCLUDED = "EXCLUDED"


@dataclass(frozen=True)
class Assignment:
    name: str
    score: str = ""
    index: int = 0
    statuses: FrozenSet[AssignmentStatus] = field(default_factory=frozenset)

    def with_status(self, status: AssignmentStatus) -> "Assignment":
        return replace(self, statuses=self.statuses | {status})

    def has_status(self, status: AssignmentStatus) -> bool:
        return status in self.statuses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "index": self.index,
            "statuses": sorted(status.value for status in self.statuses),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assignment":
        statuses = frozenset(
            AssignmentStatus(value)
            for value in data.get("statuses") or []
            if isinstance(value, str) and value in AssignmentStatus.__members__
        )
        return cls(
            name=str(data.get("name", "")),
            score=str(data.get("score", "")),
            index=_to_int(data.get("index")),
            statuses=statuses,
        )


# Column order of the indicator flags in a class detail table.
INDICATOR_ORDER = (
    AssignmentStatus.COLLECTED,
    AssignmentStatus.LATE,
    AssignmentStatus.MISSING,
    AssignmentStatus.EXEMPT,
    AssignmentStatus.ABSENT,
    AssignmentStatus.INCOMPLETE,
    AssignmentStatus.EXCLUDED,
)


@dataclass(frozen=True)
class ClassAssignment:
    """One row of a single class's assignment table."""

    index: int
    due_date: str
    category: str
    name: str
    collected: bool = False
    late: bool = False
    missing: bool = False
    exempt: bool = False
    absent: bool = False
    incomplete: bool = False
    excluded: bool = False
    score: str = ""
    percent: str = ""

    @property
    def flags(self) -> tuple:
        return (
            self.collected,
            self.late,
            self.missing,
            self.exempt,
            self.absent,
            self.incomplete,
            self.excluded,
        )

    @property
    def statuses(self) -> FrozenSet[AssignmentStatus]:
        return frozenset(
            status for status, flag in zip(INDICATOR_ORDER, self.flags) if flag
        )

    def to_assignment(self) -> Assignment:
        return Assignment(
            name=self.name, score=self.score, index=self.index, statuses=self.statuses
        )


@dataclass
class Course:
    name: str
    link: str = ""
    grade: Optional[str] = None
    final_percent: Optional[float] = None
    assignments: List[Assignment] = field(default_factory=list)

    def with_grade_from_percent(self) -> "Course":
        """Return a copy whose grade is recomputed from ``final_percent``."""
        from gradetools.conversion import percent_to_grade

        if self.final_percent is None:
            return replace(self, assignments=list(self.assignments))
        grade = percent_to_grade(self.final_percent)
        return replace(
            self,
            grade=grade if grade is not NOT_FOUND else None,
            assignments=list(self.assignments),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "link": self.link,
            "grade": self.grade,
            "finalPercent": self.final_percent,
            "assignments": [assignment.to_dict() for assignment in self.assignments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Course":
        return cls(
            name=str(data.get("name", "")),
            link=str(data.get("link") or ""),
            grade=data.get("grade"),
            final_percent=_to_float(data.get("finalPercent")),
            assignments=[
                Assignment.from_dict(item)
                for item in data.get("assignments") or []
                if isinstance(item, dict)
            ],
        )


@dataclass(frozen=True)
class PageCell:
    """A table cell as handed over by the page extractor.

    ``indicator`` is the extractor's verdict on whether a status icon in
    the cell is visible; it is trusted as-is.
    """

    text: str = ""
    html: str = ""
    indicator: bool = False


@dataclass(frozen=True)
class PageRow:
    cells: Sequence[PageCell] = ()
    missing_icon_visible: bool = False


@dataclass(frozen=True)
class ScoreRecord:
    actual_score_entered: str = ""
    is_missing: bool = False

    @classmethod
    def from_raw(cls, raw: Any) -> "ScoreRecord":
        if not isinstance(raw, dict):
            return cls()
        score = raw.get("actualscoreentered")
        return cls(
            actual_score_entered="" if score is None else str(score),
            is_missing=bool(raw.get("ismissing")),
        )


@dataclass(frozen=True)
class AssignmentSectionRecord:
    name: str
    scores: Sequence[ScoreRecord] = ()

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["AssignmentSectionRecord"]:
        if not isinstance(raw, dict):
            return None
        sections = raw.get("_assignmentsections")
        if not isinstance(sections, list) or not sections:
            return None
        section = sections[0]
        if not isinstance(section, dict):
            return None
        raw_scores = section.get("_assignmentscores") or []
        if not isinstance(raw_scores, list):
            raw_scores = []
        return cls(
            name=str(section.get("name") or ""),
            scores=tuple(ScoreRecord.from_raw(item) for item in raw_scores),
        )
