"""Build model records from already-extracted page rows and API records."""

import logging
import re
from typing import Any, Iterable, List, Optional

from bs4 import BeautifulSoup

from gradetools.models import (
    Assignment,
    AssignmentSectionRecord,
    AssignmentStatus,
    ClassAssignment,
    PageCell,
    PageRow,
)

_LOGGER = logging.getLogger(__name__)

CLASS_ROW_LENGTH = 13
MISSING_ICON_SRC = "/images/icon_missing.gif"


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split()).strip()


def _is_hidden(tag) -> bool:
    style = str(tag.get("style", "")).replace(" ", "").lower()
    return "display:none" in style


def _cell_from_tag(tag) -> PageCell:
    visible = [child for child in tag.find_all(True) if not _is_hidden(child)]
    return PageCell(
        text=_clean_text(tag.get_text(" ", strip=True)),
        html=tag.decode_contents(),
        indicator=bool(visible),
    )


def rows_from_table_html(html: str) -> List[PageRow]:
    """Turn an assignment table into rows, without header and legend rows."""
    if not html:
        return []
    soup = BeautifulSoup(html, "lxml")
    table = soup.select_one("table.zebra.grid") or soup.find("table")
    if table is None:
        return []
    rows: List[PageRow] = []
    for tr in table.find_all("tr")[1:-1]:
        cells = tr.find_all("td")
        missing_icon = tr.find("img", src=MISSING_ICON_SRC)
        rows.append(
            PageRow(
                cells=tuple(_cell_from_tag(cell) for cell in cells),
                missing_icon_visible=missing_icon is not None
                and not _is_hidden(missing_icon),
            )
        )
    return rows


def assignment_from_row(row: PageRow, index: int) -> Assignment:
    cells = list(row.cells)
    name = cells[2].text if len(cells) > 2 else ""
    score = cells[-1].text if cells else ""
    assignment = Assignment(name=name, score=score, index=index)
    if row.missing_icon_visible:
        assignment = assignment.with_status(AssignmentStatus.MISSING)
    return assignment


def assignments_from_rows(rows: Iterable[PageRow]) -> List[Assignment]:
    return [assignment_from_row(row, index) for index, row in enumerate(rows)]


def class_assignment_from_row(row: PageRow, index: int) -> Optional[ClassAssignment]:
    cells = list(row.cells)
    if len(cells) == CLASS_ROW_LENGTH:
        offset = 0
    elif len(cells) == CLASS_ROW_LENGTH + 1:
        offset = 1
    else:
        _LOGGER.debug("Skipping class row %d with %d cells", index, len(cells))
        return None
    flags = [cells[position + offset].indicator for position in range(3, 10)]
    return ClassAssignment(
        index=index,
        due_date=cells[0].text,
        category=cells[1].text,
        name=cells[2].text,
        collected=flags[0],
        late=flags[1],
        missing=flags[2],
        exempt=flags[3],
        absent=flags[4],
        incomplete=flags[5],
        excluded=flags[6],
        score=cells[10 + offset].text,
        percent=cells[11 + offset].text.strip(),
    )


def class_assignments_from_rows(rows: Iterable[PageRow]) -> List[ClassAssignment]:
    assignments = []
    for index, row in enumerate(rows):
        assignment = class_assignment_from_row(row, index)
        if assignment is not None:
            assignments.append(assignment)
    return assignments


def extract_grade_categories(rows: Iterable[PageRow]) -> List[str]:
    categories: List[str] = []
    seen = set()
    for row in rows:
        if len(row.cells) < 2:
            continue
        category = row.cells[1].text
        if category and category not in seen:
            categories.append(category)
            seen.add(category)
    return categories


def assignments_from_api(records: Any) -> List[Assignment]:
    """Map an assignment lookup response to assignments.

    Only the first section and its first score record are used. The index
    is the record's position in the response, skipped records included.
    """
    if not isinstance(records, list):
        return []
    assignments = []
    for index, raw in enumerate(records):
        section = AssignmentSectionRecord.from_raw(raw)
        if section is None:
            continue
        first_score = section.scores[0] if section.scores else None
        assignment = Assignment(
            name=section.name,
            score=first_score.actual_score_entered if first_score else "",
            index=index,
        )
        if first_score and first_score.is_missing:
            assignment = assignment.with_status(AssignmentStatus.MISSING)
        assignments.append(assignment)
    return assignments


def _parse_number(text: str) -> Optional[float]:
    text = text.strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def extract_final_percent(text: str) -> Optional[float]:
    """Read the final percent out of a scores page's inline script.

    The second ``document.write`` line carries a bracketed, ``;``-separated
    payload whose last two fields hold the percent.
    """
    if not text:
        return None
    lines = re.findall(r"document\.write.*", text)
    if len(lines) < 2:
        return None
    match = re.search(r"\[.*\]", lines[1])
    if not match:
        return None
    fields = match.group(0)[1:-1].split(";")
    candidates = [_parse_number(value) for value in fields[-2:]]
    numbers = [value for value in candidates if value is not None]
    if not numbers:
        _LOGGER.debug("No final percent in payload %r", match.group(0))
        return None
    return max(numbers)


def extract_course_title(html: str) -> Optional[str]:
    """Return the course title cell of a class page, if any."""
    if not html:
        return None
    soup = BeautifulSoup(html, "lxml")
    table = soup.find("table")
    if table is None:
        return None
    rows = table.find_all("tr")
    if len(rows) < 2:
        return None
    cell = rows[1].find("td")
    if cell is None:
        return None
    return _clean_text(cell.get_text(" ", strip=True)) or None
