import csv
from io import BytesIO

import pandas as pd
from flask import make_response

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _flatten(value):
    # Populated references export as their name (or id)
    if isinstance(value, dict):
        return value.get("name") or value.get("_id") or ""
    if isinstance(value, (list, tuple, set)):
        return ", ".join(str(_flatten(v)) for v in value)
    return value


def report_frame(rows):
    df = pd.DataFrame([{k: _flatten(v) for k, v in row.items()} for row in rows])
    return df.fillna("")


def to_csv_bytes(rows):
    if not rows:
        return b""
    return report_frame(rows).to_csv(index=False, quoting=csv.QUOTE_ALL).encode("utf-8")


def to_xlsx_bytes(rows, sheet_name="Report"):
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        report_frame(rows).to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output.read()


def export_response(rows, filename, fmt, sheet_name="Report"):
    if fmt == "xlsx":
        response = make_response(to_xlsx_bytes(rows, sheet_name))
        response.headers["Content-Type"] = XLSX_MIMETYPE
    else:
        response = make_response(to_csv_bytes(rows))
        response.headers["Content-Type"] = "text/csv; charset=utf-8"
    response.headers["Content-Disposition"] = f"attachment; filename={filename}.{fmt}"
    return response
