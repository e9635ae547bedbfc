from gradetools.models import Assignment, Course
from gradetools.utils import print_table, to_csv, to_json


def test_to_json_normalizes_courses():
    course = Course(name="Art", grade="B", assignments=[Assignment(name="Sketch")])

    text = to_json([course])

    assert '"finalPercent": null' in text
    assert '"name": "Sketch"' in text


def test_to_csv_counts_nested_lists():
    course = Course(name="Art", grade="B", assignments=[Assignment(name="Sketch")])

    lines = to_csv([course]).splitlines()

    assert lines[0] == "name,link,grade,finalPercent,assignments"
    assert lines[1] == "Art,,B,,1"


def test_print_table_aligns_columns():
    text = print_table([{"name": "Math", "gpa": 4.0}, {"name": "AP Biology", "gpa": 5.0}])

    lines = text.splitlines()
    assert lines[0] == "name       | gpa"
    assert lines[1] == "-----------+----"
    assert lines[3] == "AP Biology | 5.0"


def test_empty_inputs():
    assert print_table([]) == ""
    assert to_csv([]) == ""


def test_single_dict_is_one_row():
    data = {"grade": "A", "gpa": 4.0}

    assert to_csv(data).splitlines() == ["grade,gpa", "A,4.0"]
    assert print_table(data).splitlines()[2] == "A     | 4.0"
    assert to_json(data) == '{\n  "grade": "A",\n  "gpa": 4.0\n}'
