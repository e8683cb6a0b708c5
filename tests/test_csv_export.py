from __future__ import annotations

import datetime as dt

from csv_export import add_export_header, cell_text, export_filename, records_to_csv, rows_to_csv

WHEN = dt.datetime(2024, 6, 15, 9, 5, 7)


def test_cell_text():
    assert cell_text(None) == ""
    assert cell_text(True) == "Yes"
    assert cell_text(3.0) == "3"
    assert cell_text({"_id": "e1", "name": "Jane"}) == "Jane"
    assert cell_text(["a", None, "b"]) == "a, b"


def test_every_cell_quoted_and_quotes_doubled():
    text = rows_to_csv(["Name", "Note"], [["Jane", 'said "hi"'], ["Omar", "a,b"]])
    assert text.split("\n") == ['"Name","Note"', '"Jane","said ""hi"""', '"Omar","a,b"']


def test_records_to_csv_follows_column_paths():
    recs = [{"name": "Jane", "employee": {"name": "Boss"}, "salary": 1200.0}, {"name": "Omar"}]
    text = records_to_csv(recs, [("Name", "name"), ("Manager", "employee"), ("Salary", "salary")])
    assert text.split("\n") == ['"Name","Manager","Salary"', '"Jane","Boss","1200"', '"Omar","",""']


def test_header_only_when_no_rows():
    assert rows_to_csv(["A", "B"], []) == '"A","B"'


def test_export_header_block():
    out = add_export_header('"A"', "Employees", "jane@corp.com", now=WHEN)
    lines = out.split("\n")
    assert lines[:4] == ["Export Information:", "Page: Employees", "Exported By: jane@corp.com",
                         "Export Date & Time: 2024-06-15 09-05-07"]
    assert lines[-2:] == ["", '"A"']
    assert "Exported By: Unknown User" in add_export_header("", "X", None, now=WHEN)


def test_export_filename_sanitizes_user():
    assert export_filename("employees", "jane.doe@corp", now=WHEN) == \
        "employees_export_jane_doe_corp_2024-06-15 09-05-07.csv"
