"""CSV rendering for report exports."""
import csv
import datetime
import io
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

CSV_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "orders": ("date", "total", "completed", "revenue"),
    "production": ("date", "planned", "produced", "batches"),
    "inventory": ("itemId", "itemName", "quantity", "minStockLevel", "status"),
    "delivery": ("date", "total", "delivered", "failed", "avgDeliveryHours"),
}


@dataclass(frozen=True)
class ExportedReport:
    content: bytes
    filename: str
    media_type: str = CSV_MEDIA_TYPE
    # Format that was asked for but could not be produced
    fallback_from: Optional[str] = None


def _format_field(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def render_csv(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> str:
    """Header line plus one line per row.

    Fields holding a comma, a double quote or a newline get quoted, with inner
    quotes doubled. Missing values are written as empty fields.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_format_field(row.get(column)) for column in columns])
    return buffer.getvalue()


def export_filename(report_type: str, extension: str, today: Optional[datetime.date] = None) -> str:
    today = today or datetime.datetime.now(datetime.timezone.utc).date()
    return f"report-{report_type}-{today.isoformat()}.{extension}"
