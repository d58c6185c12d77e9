from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, Callable, Mapping

from .column_layout import ColumnSpec

DEFAULT_DATE_FORMAT = "%B %d, %Y %H:%M"

CellFormatter = Callable[[ColumnSpec, Any], Any]

SI_PREFIXES = {
    -24: "y",
    -21: "z",
    -18: "a",
    -15: "f",
    -12: "p",
    -9: "n",
    -6: "µ",
    -3: "m",
    0: "",
    3: "k",
    6: "M",
    9: "G",
    12: "T",
    15: "P",
    18: "E",
    21: "Z",
    24: "Y",
}

_NUMBER_SPEC = re.compile(
    r"^(?P<head>(?:.?[<>=^])?[+\- ]?)(?P<currency>\$)?(?P<tail>#?0?\d*,?(?:\.(?P<precision>\d+))?)(?P<type>[a-z%]?)$",
    re.IGNORECASE,
)


def field_value(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def translate_epoch_seconds(value: Any) -> dt.datetime:
    return dt.datetime.fromtimestamp(float(value))


def format_date(column: ColumnSpec, value: Any) -> str:
    pattern = column.data_format or DEFAULT_DATE_FORMAT
    if column.need_translate:
        value = translate_epoch_seconds(value)
    return value.strftime(pattern)


def _si_exponent(value: float) -> int:
    if value == 0:
        return 0
    exponent = int(math.floor(math.log10(abs(value)) / 3) * 3)
    return max(-24, min(24, exponent))


def _format_si(value: float, precision: str | None, head: str) -> str:
    digits = None if precision is None else max(1, int(precision))
    if digits is not None and math.isfinite(value):
        # Round to the significant digits first so 999999 picks "M", not "k".
        value = float(f"{value:.{digits - 1}e}")
    exponent = _si_exponent(value)
    scaled = value / (10**exponent)
    if digits is None:
        text = format(scaled, f"{head}g")
    else:
        magnitude = 0 if scaled == 0 else int(math.floor(math.log10(abs(scaled))))
        decimals = max(0, digits - 1 - magnitude)
        text = format(scaled, f"{head}.{decimals}f")
    return text + SI_PREFIXES[exponent]


def format_number(column: ColumnSpec, value: Any) -> Any:
    """Format ``value`` with the column's number pattern.

    Patterns are Python format specs with two d3-style extras: a ``$``
    currency marker after the sign and the ``s`` SI-prefix type. Columns
    without a pattern pass the raw value through.
    """

    spec = column.data_format
    if not spec:
        return value
    match = _NUMBER_SPEC.match(spec)
    if match is None:
        return format(value, spec)
    head = match.group("head")
    currency = match.group("currency") is not None
    if match.group("type") == "s":
        text = _format_si(float(value), match.group("precision"), head)
    else:
        text = format(value, head + match.group("tail") + match.group("type"))
    if currency:
        stripped = text.lstrip()
        padding = text[: len(text) - len(stripped)]
        if stripped[:1] in {"-", "+"}:
            text = f"{padding}{stripped[0]}${stripped[1:]}"
        else:
            text = f"{padding}${stripped}"
    return text


DEFAULT_FORMATTERS: dict[str, CellFormatter] = {
    "date": format_date,
    "number": format_number,
}


def format_cell(
    column: ColumnSpec,
    row: Any,
    formatters: Mapping[str, CellFormatter] | None = None,
) -> Any:
    value = field_value(row, column.key)
    if value is None:
        return None
    if not column.data_type:
        return value
    formatter = (formatters if formatters is not None else DEFAULT_FORMATTERS).get(column.data_type)
    if formatter is None:
        return value
    return formatter(column, value)


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
