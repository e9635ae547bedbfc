import argparse
import asyncio
import json
import logging
from typing import Any, Callable

from gradetools.cache import load_most_recent_courses, load_user_courses
from gradetools.conversion import (
    AVAILABLE_GRADES,
    grade_to_final_percent,
    grade_to_gpa,
    percent_to_grade,
)
from gradetools.errors import GradeToolsError
from gradetools.gpa import calculate_gpa, course_boost, credit_hours
from gradetools.models import NOT_FOUND, Course
from gradetools.settings import load_settings
from gradetools.storage import JsonFileStore
from gradetools.utils import print_table, to_csv, to_json
from gradetools.weighting import get_weighting, save_weighting


def _format_output(data: Any, output_format: str) -> str:
    if output_format == "json":
        return to_json(data)
    if output_format == "csv":
        return to_csv(data)
    return print_table(data)


def _write_output(text: str, output_path: str | None) -> None:
    if output_path:
        with open(output_path, "w", encoding="utf-8") as handle:
            handle.write(text)
        return
    print(text)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--store", help="Path of the JSON grade store")
    parser.add_argument(
        "--format",
        default="table",
        choices=("table", "json", "csv"),
        help="Output format",
    )
    parser.add_argument("--output", help="Write output to file")


def _require_value(value: Any, label: str) -> None:
    if value is None or str(value).strip() == "":
        raise ValueError(f"{label} is required")


def _open_store(args: argparse.Namespace) -> JsonFileStore:
    settings = load_settings(store_file=args.store)
    return JsonFileStore(settings.store_file)


def _read_courses_file(path: str) -> list[Course]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ValueError(f"cannot read {path}: {exc}")
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}")
    if isinstance(data, dict):
        data = data.get("courses", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must hold a list of courses")
    return [Course.from_dict(item) for item in data if isinstance(item, dict)]


def _load_courses(args: argparse.Namespace) -> list[Course]:
    if args.file:
        return _read_courses_file(args.file)
    store = _open_store(args)
    if args.user:
        courses = asyncio.run(load_user_courses(store, args.user))
    else:
        courses = asyncio.run(load_most_recent_courses(store))
    if courses is None:
        raise ValueError("no cached grades found; pass --user or --file")
    return courses


def _course_row(course: Course) -> dict:
    return {
        "name": course.name,
        "grade": course.grade,
        "finalPercent": course.final_percent,
        "credits": credit_hours(course.name),
        "boost": course_boost(course.name, course.grade),
        "assignments": len(course.assignments),
    }


def _handle_gpa(args: argparse.Namespace) -> str:
    courses = _load_courses(args)
    return _format_output({"courses": len(courses), "gpa": calculate_gpa(courses)}, args.format)


def _handle_courses(args: argparse.Namespace) -> str:
    courses = _load_courses(args)
    return _format_output([_course_row(course) for course in courses], args.format)


def _handle_convert(args: argparse.Namespace) -> str:
    if args.grade is None and args.percent is None:
        raise ValueError("--grade or --percent is required")
    if args.grade is not None:
        gpa = grade_to_gpa(args.grade)
        if gpa is NOT_FOUND:
            raise ValueError(
                f"unknown grade {args.grade!r}; expected one of {', '.join(AVAILABLE_GRADES)}"
            )
        data = {
            "grade": args.grade,
            "gpa": gpa,
            "finalPercent": grade_to_final_percent(args.grade),
        }
    else:
        grade = percent_to_grade(args.percent)
        if grade is NOT_FOUND:
            raise ValueError(f"percent {args.percent!r} has no grade")
        data = {"finalPercent": args.percent, "grade": grade, "gpa": grade_to_gpa(grade)}
    return _format_output(data, args.format)


def _handle_weighting_get(args: argparse.Namespace) -> str:
    _require_value(args.course, "--course")
    weighting = asyncio.run(get_weighting(_open_store(args), args.course))
    if weighting is NOT_FOUND:
        raise ValueError(f"no category weighting saved for {args.course!r}")
    rows = [{"category": name, "weight": value} for name, value in weighting.items()]
    return _format_output(rows, args.format)


def _parse_weight(text: str) -> tuple[str, Any]:
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise ValueError(f"weights must look like CATEGORY=VALUE, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        return name.strip(), value.strip()


def _handle_weighting_set(args: argparse.Namespace) -> str:
    _require_value(args.course, "--course")
    weighting = dict(_parse_weight(item) for item in args.weights)
    asyncio.run(save_weighting(_open_store(args), args.course, weighting))
    rows = [{"category": name, "weight": value} for name, value in weighting.items()]
    return _format_output(rows, args.format)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gradetools", description="Grade and GPA tools")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gpa_parser = subparsers.add_parser("gpa", help="Calculate GPA")
    _add_common_options(gpa_parser)
    gpa_parser.add_argument("--user", help="Cached user name (default: most recent)")
    gpa_parser.add_argument("--file", help="JSON file with a list of courses")
    gpa_parser.set_defaults(handler=_handle_gpa)

    courses_parser = subparsers.add_parser("courses", help="List cached courses")
    _add_common_options(courses_parser)
    courses_parser.add_argument("--user", help="Cached user name (default: most recent)")
    courses_parser.add_argument("--file", help="JSON file with a list of courses")
    courses_parser.set_defaults(handler=_handle_courses)

    convert_parser = subparsers.add_parser(
        "convert", help="Convert between grades, percents and grade points"
    )
    _add_common_options(convert_parser)
    convert_parser.add_argument("--grade", help="Letter grade, e.g. B+")
    convert_parser.add_argument("--percent", help="Final percent, e.g. 87.3")
    convert_parser.set_defaults(handler=_handle_convert)

    weighting_parser = subparsers.add_parser(
        "weighting", help="Show or save category weighting"
    )
    weighting_sub = weighting_parser.add_subparsers(dest="action", required=True)

    get_parser = weighting_sub.add_parser("get", help="Show saved weighting")
    _add_common_options(get_parser)
    get_parser.add_argument("--course", help="Course title")
    get_parser.set_defaults(handler=_handle_weighting_get)

    set_parser = weighting_sub.add_parser("set", help="Replace saved weighting")
    _add_common_options(set_parser)
    set_parser.add_argument("--course", help="Course title")
    set_parser.add_argument("weights", nargs="+", help="CATEGORY=VALUE pairs")
    set_parser.set_defaults(handler=_handle_weighting_set)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    handler: Callable[[argparse.Namespace], str] = args.handler
    try:
        output_text = handler(args)
    except (ValueError, GradeToolsError) as exc:
        parser.error(str(exc))
        return
    _write_output(output_text, args.output)


if __name__ == "__main__":
    main()
