"""
Per-table guest summary for seating chart exports
"""

import io
from typing import Dict, List

import pandas as pd

from app.schemas.seating import Table

SUMMARY_COLUMNS = ["Table", "Shape", "Seated", "Capacity", "Guests"]


def build_table_summary(tables: List[Table]) -> List[Dict]:
    """One row per table: occupancy and the names seated there, in seat order"""
    return [
        {
            "table": table.name,
            "shape": table.shape,
            "seated": len(table.guests),
            "capacity": table.capacity,
            "guests": [g.name for g in table.guests],
        }
        for table in tables
    ]


def summary_lines(tables: List[Table]) -> List[str]:
    """Plain text summary, e.g. ``Head Table: 3/10 guests``"""
    lines = []
    for row in build_table_summary(tables):
        lines.append(f"{row['table']}: {row['seated']}/{row['capacity']} guests")
        if row["guests"]:
            lines.append(f"  Guests: {', '.join(row['guests'])}")
    return lines


class ExportService:
    """Spreadsheet export of the seating summary"""

    @staticmethod
    def to_dataframe(tables: List[Table]) -> pd.DataFrame:
        rows = [
            [row["table"], row["shape"], row["seated"], row["capacity"], ", ".join(row["guests"])]
            for row in build_table_summary(tables)
        ]
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    @staticmethod
    def to_excel(tables: List[Table], event_name: str) -> bytes:
        """Summary sheet plus one row per seated guest on a second sheet"""
        summary = ExportService.to_dataframe(tables)
        seated = pd.DataFrame(
            [
                [table.name, seat_no, guest.name, guest.rsvp.status]
                for table in tables
                for seat_no, guest in enumerate(table.guests, start=1)
            ],
            columns=["Table", "Seat No.", "Name", "RSVP"],
        )

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            summary.to_excel(writer, index=False, sheet_name="Tables")
            seated.to_excel(writer, index=False, sheet_name="Guests")
            writer.book.properties.title = f"Seating chart - {event_name}"

        return buffer.getvalue()
