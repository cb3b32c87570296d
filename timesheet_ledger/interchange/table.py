from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone
from pathlib import Path

from timesheet_ledger.entries.hours import entry_hours, entry_rate, round_half_up


BOM = "\ufeff"
DELIMITER = ";"

HEADERS = [
    "Data",
    "Hora Inicial",
    "Hora Final",
    "Horas Trabalhadas",
    "Descrição",
    "Valor/Hora",
    "Total Ganho",
    "Status Pagamento",
]


def format_date(value: str) -> str:
    """YYYY-MM-DD as DD/MM/YYYY; anything else is passed through"""
    try:
        return date.fromisoformat(str(value)).strftime("%d/%m/%Y")
    except ValueError:
        return str(value)


def format_hours(hours: float) -> str:
    """Shortest decimal form with a comma, e.g. 8 or 8,5"""
    text = str(int(hours)) if float(hours).is_integer() else repr(float(hours))
    return text.replace(".", ",")


def format_money(value: float) -> str:
    return f"R$ {round_half_up(value):.2f}".replace(".", ",")


def quote(text: str) -> str:
    return '"' + str(text).replace('"', '""') + '"'


def table_row(entry: Mapping) -> list[str]:
    hours = entry_hours(entry)
    rate = entry_rate(entry)
    return [
        format_date(entry.get("date")),
        str(entry.get("startTime", "")),
        str(entry.get("endTime", "")),
        format_hours(hours),
        quote(entry.get("description", "")),
        format_money(rate),
        format_money(hours * rate),
        "Pago" if entry.get("isPaid") else "Pendente",
    ]


def export_table(entries: Iterable[Mapping]) -> str:
    """Semicolon separated sheet, one row per entry in the given order, prefixed with a BOM"""
    rows = [HEADERS, *(table_row(entry) for entry in entries)]
    return BOM + "\n".join(DELIMITER.join(row) for row in rows)


def table_filename(day: date | None = None) -> str:
    day = day or datetime.now(timezone.utc).date()
    return f"controle-horas-{day.isoformat()}.csv"


def write_table(entries: Iterable[Mapping], directory: Path, day: date | None = None) -> Path:
    path = Path(directory) / table_filename(day)
    path.write_text(export_table(entries), encoding="utf-8")
    return path
