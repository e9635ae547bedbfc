import csv
import json
from io import StringIO


def _as_dict(item):
    if hasattr(item, "to_dict"):
        return item.to_dict()
    return item


def _rows(data):
    if isinstance(data, (list, tuple)):
        return [_as_dict(item) for item in data]
    return [_as_dict(data)]


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return str(len(value))
    return str(value)


def _headers(rows):
    headers = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    return headers


def to_json(data):
    if isinstance(data, (list, tuple)):
        payload = _rows(data)
    else:
        payload = _as_dict(data)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_csv(data):
    rows = _rows(data)
    if not rows:
        return ""
    headers = _headers(rows)
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=headers)
    writer.writeheader()
    for row in rows:
        writer.writerow({header: _cell(row.get(header)) for header in headers})
    return buffer.getvalue()


def print_table(data):
    rows = _rows(data)
    if not rows:
        return ""
    headers = _headers(rows)
    cells = [[_cell(row.get(header)) for header in headers] for row in rows]
    widths = [
        max([len(header)] + [len(line[index]) for line in cells])
        for index, header in enumerate(headers)
    ]

    def render(values):
        return " | ".join(value.ljust(width) for value, width in zip(values, widths))

    separator = "-+-".join("-" * width for width in widths)
    return "\n".join([render(headers), separator] + [render(line) for line in cells])
