"""CSV encoding of query results.

The header is always written, so an empty result still yields one line.
Every row must carry a value (possibly null) for every declared column.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import csv
import io

from sqlgate_mcp.errors import EncodeError
from sqlgate_mcp.execute.models import Cell, format_cell


def encode_csv(rows: Sequence[Mapping[str, Cell]], columns: Sequence[str]) -> str:
    """Serialize rows to CSV text in the given column order.

    Raises:
        EncodeError: If a row lacks one of ``columns`` or the writer fails.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    # QUOTE_MINIMAL only quotes a bare "\r" when it is part of the line terminator.
    cr_writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_ALL)

    def write(fields: Sequence[str]) -> None:
        (cr_writer if any("\r" in f for f in fields) else writer).writerow(fields)

    try:
        write(columns)
    except (csv.Error, OSError) as exc:
        msg = f"failed to write headers: {exc}"
        raise EncodeError(msg) from exc

    for item in rows:
        record: list[str] = []
        for column in columns:
            if column not in item:
                msg = f"key '{column}' not found in row"
                raise EncodeError(msg)
            record.append(format_cell(item[column]))
        try:
            write(record)
        except (csv.Error, OSError) as exc:
            msg = f"failed to write row: {exc}"
            raise EncodeError(msg) from exc

    try:
        buf.flush()
    except OSError as exc:
        msg = f"error flushing CSV writer: {exc}"
        raise EncodeError(msg) from exc

    return buf.getvalue()
