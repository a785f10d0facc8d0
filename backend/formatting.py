"""Parsing and display helpers for the free-text currency fields of the wizard.

Everything the user types arrives as text ("$12,500", "12500.00", "", "n/a").
``parse_amount`` turns that into a number and never raises; the ``format_*``
helpers turn numbers back into display strings for inputs and reports.
"""

import calendar
import logging
import math
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional, Union

logger = logging.getLogger(__name__)

Amount = Union[str, int, float, None]

_NUMBER_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)")
_MONTHS = {name.lower(): idx for idx, name in enumerate(calendar.month_name) if name}
_MONTHS.update({abbr.lower(): idx for idx, abbr in enumerate(calendar.month_abbr) if abbr})


def parse_amount(value: Amount, allow_negative: bool = False) -> float:
    """Convert a user-entered amount to a float.

    Every character except digits and the decimal point is dropped (a leading
    minus sign survives when ``allow_negative`` is set), then the leading
    number is read. Empty or unparseable input is 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        if not math.isfinite(number):
            return 0.0
        return number if allow_negative else abs(number)

    pattern = r"[^\d.-]" if allow_negative else r"[^\d.]"
    cleaned = re.sub(pattern, "", str(value))
    match = _NUMBER_RE.match(cleaned)
    if not match:
        return 0.0
    number = float(match.group(0))
    # A long enough run of digits overflows to inf.
    return number if math.isfinite(number) else 0.0


def to_number_or_none(value: Amount) -> Optional[float]:
    """Like ``parse_amount`` but keeps "nothing entered" as None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, str) and not re.search(r"\d", value):
        return None
    return parse_amount(value, allow_negative=True)


def _round_half_up(value: float, digits: int = 0) -> Decimal:
    number = Decimal(repr(value))
    if not number.is_finite():
        return number
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + digits + 2)
        return number.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def round2(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return float(_round_half_up(value, 2))


def _dollars(value: float, digits: int = 0) -> str:
    rounded = _round_half_up(value, digits)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.{digits}f}"


def format_amount(value: Amount) -> str:
    """Render an input amount as ``$12,345``.

    Nothing entered renders as an empty string so the field placeholder shows;
    an explicit zero renders as ``$0``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        if not value.strip():
            return ""
        value = parse_amount(value, allow_negative=True)
    return _dollars(float(value))


def format_currency(value: Optional[float], digits: int = 0) -> str:
    """Report rendering of an amount; missing values show as ``$0``."""
    return _dollars(float(value or 0), digits)


def format_percentage(value: Optional[float], digits: int = 1) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "N/A"
    return f"{_round_half_up(value * 100, digits)}%"


def format_ratio(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return str(_round_half_up(value, 2))


def parse_ytd_month(value: Union[str, int, None]) -> int:
    """Number of months (1-12) covered by the year-to-date period, or 0.

    Accepts ``"06"``, ``6``, ``"June"`` or ``"jun"``.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        month = value
    else:
        text = str(value).strip()
        if not text:
            return 0
        if text.isdigit():
            month = int(text)
        else:
            month = _MONTHS.get(text.lower(), 0)
            if not month:
                logger.warning("Unrecognized YTD month %r, treating as 0 months", text)
                return 0
    if not 1 <= month <= 12:
        logger.warning("YTD month %r out of range, treating as 0 months", value)
        return 0
    return month


def ytd_month_name(value: Union[str, int, None]) -> str:
    month = parse_ytd_month(value)
    if month:
        return calendar.month_name[month]
    return "" if value is None else str(value).strip()


def term_years_label(months: Amount) -> str:
    """``60`` -> ``"5 Years"``; ``12`` -> ``"1 Year"``; nothing -> ``""``."""
    n = int(parse_amount(months))
    if n == 0:
        return ""
    years = n / 12
    if years == 1:
        return "1 Year"
    return f"{years:g} Years"
