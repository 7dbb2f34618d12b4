"""Tests for number formatting and the fixed-column report."""

import pytest
from beartype.roar import BeartypeCallHintParamViolation

from zone_profiling import (
    TimeUnit,
    ZoneResult,
    digits_before_point,
    format_number,
    fractional_string,
    render_report,
)


def make_result(name, median, mean, worst, std_dev):
    return ZoneResult(
        name=name,
        sorted_samples=(median,),
        median=median,
        mean=mean,
        worst=worst,
        std_dev=std_dev,
    )


# ---------------------------------------------------------------------------
# digits_before_point / fractional_string
# ---------------------------------------------------------------------------

class TestDigitHelpers:
    @pytest.mark.parametrize(
        "num,expected",
        [(99, 2), (10, 2), (-10, 2), (5, 1), (55, 2), (0.1, 0), (0.11, 0), (0.01, 0), (123.9, 3)],
    )
    def test_digits_before_point(self, num, expected):
        assert digits_before_point(num) == expected

    @pytest.mark.parametrize(
        "num,digits,expected",
        [(1.234, 2, "23"), (1.235, 2, "24"), (1.235, 3, "235"), (1.235, 1, "2"), (2.05, 2, "05")],
    )
    def test_fractional_string(self, num, digits, expected):
        assert fractional_string(num, digits) == expected

    def test_fractional_string_requires_positive_digits(self):
        with pytest.raises(AssertionError, match="positive"):
            fractional_string(1.5, 0)


# ---------------------------------------------------------------------------
# format_number
# ---------------------------------------------------------------------------

class TestFormatNumber:
    @pytest.mark.parametrize(
        "value,digits,signed,expected",
        [
            (99.5, 2, True, "+100"),
            (99.5, 2, False, "100"),
            (99.1, 2, True, "+99"),
            (99.1, 3, True, "+99.1"),
            (99.1, 4, True, "+99.10"),
            (99.0, 4, True, "+99.00"),
            (0.110, 3, False, "0.110"),
            (0.111, 3, False, "0.111"),
            (-33.333, 2, True, "-33"),
            (-0.5, 3, True, "-0.500"),
            (1234.4, 3, False, "1234"),
        ],
    )
    def test_significant_digits(self, value, digits, signed, expected):
        assert format_number(value, digits, signed=signed) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(9.996, "10.0"), (0.9996, "1.00"), (1.9996, "2.00")],
    )
    def test_fraction_carry_keeps_digit_count(self, value, expected):
        assert format_number(value, 3) == expected

    def test_non_finite_values(self):
        assert format_number(float("inf"), 3) == "inf"
        assert format_number(float("-inf"), 2, signed=True) == "-inf"
        assert format_number(float("nan"), 3) == "nan"

    def test_zero_digits_raises(self):
        with pytest.raises(AssertionError, match="positive"):
            format_number(1.0, 0)

    def test_beartype_rejects_string_value(self):
        with pytest.raises(BeartypeCallHintParamViolation):
            format_number("1.0", 3)


# ---------------------------------------------------------------------------
# render_report
# ---------------------------------------------------------------------------

class TestRenderReport:
    @pytest.fixture
    def results(self):
        return (
            make_result("all", median=10.0, mean=10.0, worst=12.0, std_dev=1.0),
            make_result("A", median=6.0, mean=6.5, worst=8.0, std_dev=0.65),
            make_result("shadows", median=9.0, mean=9.0, worst=12.0, std_dev=0.0),
        )

    def test_exact_layout_in_milliseconds(self, results):
        expected = (
            " " * 12 + " median[ms]  mean[ms]    worst[ms]     std dev[%]\n"
            + "all:" + " " * 9 + "10.0" + " " * 8 + "10.0" + " " * 8 + "12.0" + " " * 10 + "10.0 \n"
            + "w/o A:" + " " * 7 + "6.00 (-40%) 6.50 (-35%) 8.00 (-33%)" + " " * 3 + "10.0 \n"
            + "w/o shadows: 9.00 (-10%) 9.00 (-10%) 12.0 (+0.00%) 0.000\n"
        )
        assert render_report(results) == expected

    def test_fps_converts_and_relabels(self):
        results = (
            make_result("all", median=10.0, mean=10.0, worst=10.0, std_dev=0.0),
            make_result("draw", median=5.0, mean=5.0, worst=5.0, std_dev=0.0),
        )
        lines = render_report(results, TimeUnit.FPS).splitlines()
        assert "median[fps]" in lines[0]
        assert "std dev[%]" in lines[0]
        assert lines[1].startswith("all:")
        assert "100 " in lines[1]
        assert "200 (+100%)" in lines[2]

    def test_relative_std_dev_has_no_baseline_suffix(self, results):
        last_column = [line.split(" ", 1)[1] for line in render_report(results).splitlines()[1:]]
        assert all(line.rstrip().endswith(("10.0", "0.000")) for line in last_column)

    def test_rows_are_padded_to_equal_width(self, results):
        rows = render_report(results).splitlines()[1:]
        assert len({len(row) for row in rows}) == 1

    def test_short_names_use_minimum_width(self):
        results = (
            make_result("all", median=1.0, mean=1.0, worst=1.0, std_dev=0.0),
            make_result("x", median=1.0, mean=1.0, worst=1.0, std_dev=0.0),
        )
        rows = render_report(results).splitlines()
        assert rows[1].startswith("all:" + " " * 5)
        assert rows[2].startswith("w/o x:" + " " * 3)

    def test_zero_baseline_renders_infinite_change(self):
        results = (
            make_result("all", median=0.0, mean=0.0, worst=0.0, std_dev=0.0),
            make_result("x", median=1.0, mean=1.0, worst=1.0, std_dev=0.0),
        )
        report = render_report(results)
        assert "(+inf%)" in report
        assert "nan" in report

    def test_empty_results_render_nothing(self):
        assert render_report(()) == ""

    def test_every_line_is_newline_terminated(self, results):
        report = render_report(results)
        assert report.endswith("\n")
        assert not report.startswith("\n")
        assert report.count("\n") == len(results) + 1
