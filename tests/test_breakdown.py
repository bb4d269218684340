import pytest

from report_builders import document, row, section, summary
from xero_finsight.breakdown import (
    LEGACY_EXPENSE_SECTIONS,
    BreakdownPolicy,
    ExpenseLine,
    extract_section_breakdown,
    find_section,
)
from xero_finsight.report import ReportDocument


def test_total_rows_are_excluded_and_signs_normalized() -> None:
    """Negative amounts are kept as absolute values, totals are skipped."""
    doc = document(
        section(
            "Less Operating Expenses",
            row("Total Operating Expenses", -500),
            row("Rent", -200),
            row("Utilities", -100),
        )
    )

    lines = extract_section_breakdown(doc, "less operating expenses")

    assert [line.name for line in lines] == ["Rent", "Utilities"]
    assert lines[0].value == pytest.approx(200.0)
    assert lines[0].percentage == pytest.approx(66.6667, rel=1e-4)
    assert lines[1].value == pytest.approx(100.0)
    assert lines[1].percentage == pytest.approx(33.3333, rel=1e-4)


def test_summary_row_and_section_label_are_not_line_items() -> None:
    doc = document(
        section(
            "Less Operating Expenses",
            summary("Total Operating Expenses", 1000),
            row("Rent", 600),
            row("Software", 400),
            row("Less Operating Expenses", 1000),
        )
    )

    lines = extract_section_breakdown(doc)

    assert all(isinstance(line, ExpenseLine) for line in lines)
    assert [(line.name, line.value) for line in lines] == [
        ("Rent", 600.0),
        ("Software", 400.0),
    ]
    assert [line.percentage for line in lines] == pytest.approx([60.0, 40.0])


def test_truncates_to_ten_with_percentages_over_all_lines() -> None:
    rows = [row(f"Expense {i:02d}", i * 10) for i in range(1, 16)]
    doc = document(section("Less Operating Expenses", *rows))

    lines = extract_section_breakdown(doc)

    assert len(lines) == 10
    values = [line.value for line in lines]
    assert values == sorted(values, reverse=True)
    assert values[0] == pytest.approx(150.0)
    assert values[-1] == pytest.approx(60.0)
    # Sum of the 15 lines is 1200.
    assert lines[0].percentage == pytest.approx(12.5)
    assert sum(line.percentage for line in lines) < 100


def test_shown_denominator_uses_truncated_lines() -> None:
    rows = [row(f"Expense {i:02d}", i * 10) for i in range(1, 16)]
    doc = document(section("Less Operating Expenses", *rows))

    lines = extract_section_breakdown(
        doc, policy=BreakdownPolicy(denominator="shown")
    )

    # Top 10 lines are 60..150, summing to 1050.
    assert lines[0].percentage == pytest.approx(150 / 1050 * 100)
    assert sum(line.percentage for line in lines) == pytest.approx(100.0)


def test_ties_keep_encounter_order() -> None:
    doc = document(
        section(
            "Less Operating Expenses",
            row("Bank Fees", 50),
            row("Rent", 300),
            row("Cleaning", 50),
            row("Postage", 50),
        )
    )

    names = [line.name for line in extract_section_breakdown(doc)]

    assert names == ["Rent", "Bank Fees", "Cleaning", "Postage"]


def test_zero_and_non_numeric_values_are_dropped() -> None:
    doc = document(
        section(
            "Less Operating Expenses",
            row("Rent", 0),
            row("Insurance", "n/a"),
            row("Travel", "120.00"),
        )
    )

    lines = extract_section_breakdown(doc)

    assert [line.name for line in lines] == ["Travel"]
    assert lines[0].percentage == pytest.approx(100.0)


@pytest.mark.parametrize(
    "sign_policy, expected",
    [
        ("absolute", ["Rent", "Refund", "Fees"]),
        ("positive", ["Rent", "Fees"]),
        ("negative", ["Refund"]),
    ],
)
def test_sign_policies(sign_policy: str, expected: list[str]) -> None:
    doc = document(
        section(
            "Less Operating Expenses",
            row("Rent", 500),
            row("Refund", -200),
            row("Fees", 100),
        )
    )

    lines = extract_section_breakdown(
        doc, policy=BreakdownPolicy(sign_policy=sign_policy)
    )

    assert [line.name for line in lines] == expected
    assert all(line.value > 0 for line in lines)


def test_only_direct_children_of_the_first_matching_section() -> None:
    doc = document(
        section(
            "Less Operating Expenses",
            row("Rent", 100),
            section("Nested", row("Deep", 999)),
        ),
        section("Less Operating Expenses (Branch)", row("Branch Rent", 50)),
    )

    lines = extract_section_breakdown(doc)

    assert [line.name for line in lines] == ["Rent"]


def test_legacy_section_matcher() -> None:
    doc = document(
        section("Income", row("Sales", 1000)),
        section("Less Cost of Sales", row("Purchases", -300)),
    )

    lines = extract_section_breakdown(doc, LEGACY_EXPENSE_SECTIONS)

    assert [line.name for line in lines] == ["Purchases"]
    assert find_section(doc, LEGACY_EXPENSE_SECTIONS).title == "Less Cost of Sales"


def test_missing_section_or_empty_document() -> None:
    doc = document(section("Income", row("Sales", 1000)))

    assert extract_section_breakdown(doc) == []
    assert extract_section_breakdown(ReportDocument()) == []


def test_invalid_arguments_fail_fast() -> None:
    with pytest.raises(ValueError):
        BreakdownPolicy(sign_policy="sometimes")
    with pytest.raises(ValueError):
        BreakdownPolicy(denominator="half")
    with pytest.raises(ValueError):
        BreakdownPolicy(limit=0)
    with pytest.raises(ValueError):
        extract_section_breakdown(ReportDocument(), "  ")
    with pytest.raises(TypeError):
        extract_section_breakdown(None)  # type: ignore[arg-type]
