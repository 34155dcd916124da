"""
Filter Evaluator - parse and evaluate metadata predicates.

Grammar (one filter per expression):

    key OP value        OP in {=, >=, <=, >, <}
    key in a,b,c

Malformed expressions are dropped with a warning; the remaining filters
still apply. A chunk passes only if every filter passes.

Ordering operators compare numerically when both sides are finite numbers,
otherwise as dates when both sides parse as dates. A value such as "2024"
is therefore always treated as a number. Anything else fails the filter.
"""

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..contracts.retrieval_contracts import (
    Filter,
    FilterOperator,
    FilterParseResult,
)
from ..core.exceptions import FilterSyntaxError


logger = logging.getLogger(__name__)

FILTER_PATTERN = re.compile(
    r"^\s*(?P<key>[A-Za-z0-9_.\-]+)\s*"
    r"(?:(?P<op>>=|<=|=|>|<)|\s(?P<in>in)\s)"
    r"\s*(?P<value>\S.*?)\s*$"
)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)


def parse_filter(expression: str) -> Filter:
    """
    Parse a single `key OP value` expression.

    Raises:
        FilterSyntaxError: If the expression does not match the grammar
    """
    match = FILTER_PATTERN.match(expression or "")
    if not match:
        raise FilterSyntaxError(f"Malformed filter expression: {expression!r}", expression=expression)

    key = match.group("key")
    raw_value = match.group("value")

    if match.group("in"):
        values = tuple(v.strip() for v in raw_value.split(",") if v.strip())
        if not values:
            raise FilterSyntaxError(f"Empty list in filter: {expression!r}", expression=expression)
        return Filter(key=key, operator=FilterOperator.IN, value=values)

    return Filter(key=key, operator=FilterOperator(match.group("op")), value=raw_value)


def parse_filters(expressions: Iterable[str]) -> FilterParseResult:
    """
    Parse filter expressions, dropping malformed ones.

    Args:
        expressions: Filter expressions in order

    Returns:
        FilterParseResult with parsed filters and rejected expressions
    """
    result = FilterParseResult()
    for expression in expressions:
        try:
            result.filters.append(parse_filter(expression))
        except FilterSyntaxError as e:
            logger.warning(f"Dropping filter: {e}")
            result.rejected.append(expression)
    return result


def to_text(value: Any) -> str:
    """Textual form of a metadata value; lists join with commas."""
    if isinstance(value, list):
        return ",".join(to_text(v) for v in value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_number(value: Any) -> Optional[float]:
    """Finite float for numeric-looking values, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def to_datetime(value: Any) -> Optional[datetime]:
    """Timezone-aware datetime for date-looking values, else None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        parsed = None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _compare(left: Any, right: Any, operator: FilterOperator) -> bool:
    if operator is FilterOperator.GTE:
        return left >= right
    if operator is FilterOperator.LTE:
        return left <= right
    if operator is FilterOperator.GT:
        return left > right
    return left < right


def evaluate(metadata: Dict[str, Any], flt: Filter) -> bool:
    """
    Evaluate one filter against a chunk's metadata.

    Missing keys fail. Ordering comparisons that are neither numeric nor
    dates fail rather than raise.
    """
    if flt.key not in metadata:
        return False
    actual = metadata[flt.key]

    if flt.operator is FilterOperator.EQ:
        return to_text(actual) == flt.value

    if flt.operator is FilterOperator.IN:
        return to_text(actual) in flt.value

    left_num, right_num = to_number(actual), to_number(flt.value)
    if left_num is not None and right_num is not None:
        return _compare(left_num, right_num, flt.operator)

    left_date, right_date = to_datetime(actual), to_datetime(flt.value)
    if left_date is not None and right_date is not None:
        return _compare(left_date, right_date, flt.operator)

    return False


def matches_all(metadata: Dict[str, Any], filters: List[Filter]) -> bool:
    """True if every filter passes (an empty filter set passes)."""
    return all(evaluate(metadata, flt) for flt in filters)
