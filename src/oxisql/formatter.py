"""Box-drawn rendering of query results."""

from __future__ import annotations

from oxisql.connector import QueryResult, ResultTable, RowsAffected
from oxisql.utils import pad_start, visible_width

TOP_LEFT = "┌"
TOP_RIGHT = "┐"
BOTTOM_LEFT = "└"
BOTTOM_RIGHT = "┘"
HORIZONTAL = "─"
VERTICAL = "│"

CROSS = "┼"
TOP_T = "┬"
BOTTOM_T = "┴"
LEFT_T = "├"
RIGHT_T = "┤"

EMPTY_SET = "Empty set"


def _separator(widths: list[int], left: str, middle: str, right: str) -> str:
    return left + middle.join(HORIZONTAL * (w + 2) for w in widths) + right


def _row(cells: list[str], widths: list[int]) -> str:
    padded = (pad_start(cell, width) for cell, width in zip(cells, widths))
    return VERTICAL + VERTICAL.join(f" {cell} " for cell in padded) + VERTICAL


def format_table(table: ResultTable) -> str:
    """Render *table* with right-aligned cells, followed by a blank line."""
    if not table.rows:
        return EMPTY_SET + "\n"

    widths = [visible_width(h) for h in table.headers]
    for row in table.rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], visible_width(cell))

    lines = [
        _separator(widths, TOP_LEFT, TOP_T, TOP_RIGHT),
        _row(table.headers, widths),
        _separator(widths, LEFT_T, CROSS, RIGHT_T),
    ]
    lines.extend(_row(row, widths) for row in table.rows)
    lines.append(_separator(widths, BOTTOM_LEFT, BOTTOM_T, BOTTOM_RIGHT))
    return "\n".join(lines) + "\n"


def format_result(result: QueryResult) -> str:
    if isinstance(result, RowsAffected):
        noun = "row" if result.affected_rows == 1 else "rows"
        return f"Query OK, {result.affected_rows} {noun} affected\n"
    return format_table(result)
