"""Fixed-column text report for zone results.

Report layout (one header line, then one line per zone):

                 median[ms]  mean[ms]    worst[ms]     std dev[%]
    all:         10.0        10.0        12.0          10.0
    w/o A:       6.00 (-40%) 6.50 (-35%) 8.00 (-33%)   10.0
    w/o shadows: 9.00 (-10%) 9.00 (-10%) 12.0 (+0.00%) 0.000

Values carry three significant digits, percentage deltas two. Columns are
left-justified and padded to their widest cell (minimum 3).
"""

import math
from enum import Enum

from beartype import beartype

from zone_profiling._stats import Results, ZoneResult

VALUE_DIGITS = 3
PERCENT_DIGITS = 2
WITHOUT_PREFIX = "w/o "
AGGREGATE_LABEL = "all"
MIN_COLUMN_WIDTH = 3


class TimeUnit(Enum):
    """Unit used for median/mean/worst in the report."""

    MILLISECONDS = "ms"
    FPS = "fps"


class Statistic(Enum):
    MEDIAN = "median"
    MEAN = "mean"
    WORST = "worst"
    STD_DEV = "std dev"


def _round_half_up(x: float) -> int:
    # matches std::round for non-negative input, unlike round()'s banker's rounding
    return math.floor(x + 0.5)


@beartype
def digits_before_point(num: int | float) -> int:
    """Number of integer digits; 0 for magnitudes below one."""
    magnitude = abs(num)
    if magnitude < 1.0:
        return 0
    return len(str(int(magnitude)))


@beartype
def fractional_string(num: float, digits: int) -> str:
    """Fractional remainder of ``num`` scaled to ``digits`` places, zero padded.

    The remainder is rounded half away from zero and may round up to
    ``10**digits``; callers that need a carry use ``format_number``.
    """
    assert digits > 0, f"Fraction digits must be positive: {digits}"
    fractional, _ = math.modf(abs(num))
    return str(_round_half_up(fractional * 10**digits)).zfill(digits)


@beartype
def format_number(value: float, significant_digits: int, signed: bool = False) -> str:
    """Render ``value`` with a fixed number of significant digits.

    If the rounded integer part already fills all digits it is emitted
    alone; otherwise the fraction supplies the remaining digits.

    Example:
        format_number(99.5, 2, signed=True)  -> "+100"
        format_number(99.1, 3, signed=True)  -> "+99.1"
        format_number(0.111, 3)              -> "0.111"
    """
    assert significant_digits > 0, (
        f"Significant digits must be positive: {significant_digits}"
    )
    sign = ("-" if value < 0 else "+") if signed else ""
    magnitude = abs(value)
    if not math.isfinite(magnitude):
        return f"{sign}{magnitude}"

    whole_rounded = _round_half_up(magnitude)
    if digits_before_point(whole_rounded) >= significant_digits:
        return f"{sign}{whole_rounded}"

    predot_digits = digits_before_point(magnitude)
    integral = int(magnitude)
    digits_left = significant_digits - predot_digits

    fraction = fractional_string(magnitude, digits_left)
    if len(fraction) > digits_left:
        # 9.996 -> "10.0": carry into the integer part, give up one decimal
        integral += 1
        fraction = fraction[1:]
        if digits_before_point(integral) > predot_digits:
            fraction = fraction[:-1]
        if not fraction:
            return f"{sign}{integral}"
    return f"{sign}{integral}.{fraction}"


def percentage(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return 100.0 * numerator / denominator


def _in_unit(ms_value: float, time_unit: TimeUnit) -> float:
    if time_unit is TimeUnit.MILLISECONDS:
        return ms_value
    if ms_value == 0:
        return math.inf
    return 1000.0 / ms_value


def statistic_value(result: ZoneResult, statistic: Statistic, time_unit: TimeUnit) -> float:
    """Raw value of one statistic, converted to the report unit.

    The std dev row is unit-free: it is the zone's own coefficient of
    variation in percent.
    """
    if statistic is Statistic.STD_DEV:
        return percentage(result.std_dev, result.mean)
    ms_value = {
        Statistic.MEDIAN: result.median,
        Statistic.MEAN: result.mean,
        Statistic.WORST: result.worst,
    }[statistic]
    return _in_unit(ms_value, time_unit)


def format_cell(
    result: ZoneResult,
    baseline: ZoneResult,
    is_baseline: bool,
    statistic: Statistic,
    time_unit: TimeUnit,
) -> str:
    value = statistic_value(result, statistic, time_unit)
    cell = format_number(value, VALUE_DIGITS)
    if is_baseline or statistic is Statistic.STD_DEV:
        return cell
    baseline_value = statistic_value(baseline, statistic, time_unit)
    change = percentage(value - baseline_value, baseline_value)
    return f"{cell} ({format_number(change, PERCENT_DIGITS, signed=True)}%)"


def header_label(statistic: Statistic, time_unit: TimeUnit) -> str:
    if statistic is Statistic.STD_DEV:
        return f"{statistic.value}[%]"
    return f"{statistic.value}[{time_unit.value}]"


def row_label(index: int, result: ZoneResult) -> str:
    name = AGGREGATE_LABEL if index == 0 else WITHOUT_PREFIX + result.name
    return f"{name}:"


@beartype
def render_report(results: Results, time_unit: TimeUnit = TimeUnit.MILLISECONDS) -> str:
    """Render results (index 0 = aggregate) as the fixed-column report text.

    Args:
        results: Ordered zone results, aggregate first
        time_unit: Milliseconds, or frames per second (1000 / ms)

    Returns:
        Header line plus one line per zone, each newline-terminated.
        Empty string for empty results.
    """
    if not results:
        return ""

    baseline = results[0]
    columns: list[tuple[str, list[str], int]] = []
    for statistic in Statistic:
        cells = [
            format_cell(result, baseline, i == 0, statistic, time_unit)
            for i, result in enumerate(results)
        ]
        width = max([MIN_COLUMN_WIDTH, *(len(cell) for cell in cells)])
        columns.append((header_label(statistic, time_unit), cells, width))

    longest_name = max([MIN_COLUMN_WIDTH, *(len(result.name) for result in results)])
    name_width = longest_name + len(WITHOUT_PREFIX) + 1

    header = " ".join(
        ["".rjust(name_width), *(label.ljust(width) for label, _, width in columns)]
    )
    lines = [header]
    for i, result in enumerate(results):
        row = [row_label(i, result).ljust(name_width)]
        row.extend(column_cells[i].ljust(width) for _, column_cells, width in columns)
        lines.append(" ".join(row))
    return "".join(f"{line}\n" for line in lines)
