"""
Export service: a room's games as downloadable files

- draft_csv: picked games only, one row per pick
- bookkeeping_workbook: every game in an .xlsx sheet named "Draft", with
  numeric currency-formatted prices and blank columns kept for manual
  resale bookkeeping
"""
import csv
import io
from typing import Iterable

import pandas as pd
from openpyxl.utils import get_column_letter

from core.room_store import ItemRecord

DRAFT_HEADERS = ["Player", "Date", "Time", "Day", "Opponent", "Tier", "Price"]

# (header, column width in characters)
BOOKKEEPING_COLUMNS = [
    ("Game", 6),
    ("Day", 4),
    ("Date", 10),
    ("Time", 9),
    ("Opponent", 24),
    ("Tier", 10),
    ("Price Each", 12),
    ("Drafted", 14),
    ("Starting Retail Value", 18),
    ("Selling", 10),
    ("Sold Price", 10),
    ("Fee Each", 10),
    ("Profit", 12),
]
BOOKKEEPING_HEADERS = [header for header, _ in BOOKKEEPING_COLUMNS]

SHEET_NAME = "Draft"
CURRENCY_FORMAT = "$#,##0.00"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_filename(season: str, extension: str) -> str:
    return f"celtics_{season}_draft.{extension}"


def draft_csv(games: Iterable[ItemRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(DRAFT_HEADERS)
    for g in games:
        if not g.picked_by:
            continue
        writer.writerow([g.picked_by, g.date, g.time, g.day, g.opponent, g.tier, str(g.price)])
    return buf.getvalue()


def bookkeeping_workbook(games: Iterable[ItemRecord]) -> bytes:
    """
    Build the bookkeeping spreadsheet.

    Price Each (column G) is written as a number with the $#,##0.00 format
    so the resale columns can compute against it.
    """
    rows = [
        [i, g.day, g.date, g.time, g.opponent, g.tier, float(g.price), g.picked_by or "",
         None, None, None, None, None]
        for i, g in enumerate(games, start=1)
    ]
    df = pd.DataFrame(rows, columns=BOOKKEEPING_HEADERS)

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        ws = writer.sheets[SHEET_NAME]

        for col, (_, width) in enumerate(BOOKKEEPING_COLUMNS, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width

        price_col = BOOKKEEPING_HEADERS.index("Price Each") + 1
        for row in range(2, len(rows) + 2):
            ws.cell(row=row, column=price_col).number_format = CURRENCY_FORMAT

    return buf.getvalue()
