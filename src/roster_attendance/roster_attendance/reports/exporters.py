"""Render a ClassSummary as CSV or JSON.

Both formats read the same aggregate so their numbers always agree.
"""

from __future__ import annotations

import csv
import io
import json

from .model import ClassSummary

CSV_COLUMNS = ("Roll No", "Name", "Email", "Present", "Total", "Percentage", "Status", "Is Defaulter")
DEFAULTER_COLUMNS = ("Roll No", "Name", "Percentage")


def _pct(value: float) -> str:
    return f"{round(value, 2):.2f}%"


def to_csv(summary: ClassSummary) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")

    writer.writerow([f"Attendance Report - {summary.class_name}"])
    writer.writerow([f"Subject: {summary.subject}"])
    writer.writerow([f"Room: {summary.room}"])
    if summary.generated_by:
        writer.writerow([f"Generated by: {summary.generated_by}"])
    writer.writerow([f"Generated on: {summary.generated_on:%Y-%m-%d}"])
    writer.writerow([f"Total Students: {summary.total_students}"])
    writer.writerow([f"Total Class Days: {summary.total_class_days}"])
    writer.writerow([])

    writer.writerow(CSV_COLUMNS)
    for line in summary.lines:
        writer.writerow(
            [
                line.roll_no,
                line.name,
                line.email or "",
                line.present,
                line.total,
                _pct(line.percentage),
                line.band.value,
                "YES" if line.is_defaulter else "NO",
            ]
        )

    writer.writerow([])
    writer.writerow(["DEFAULTERS (Below 75% Attendance):"])
    writer.writerow(DEFAULTER_COLUMNS)
    for line in summary.defaulters:
        writer.writerow([line.roll_no, line.name, _pct(line.percentage)])

    return out.getvalue()


def to_json(summary: ClassSummary) -> str:
    return json.dumps(summary.to_dict(), ensure_ascii=False)


def csv_filename(summary: ClassSummary) -> str:
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in summary.class_name)
    return f"attendance-report-{safe}-{summary.generated_on:%Y-%m-%d}.csv"
