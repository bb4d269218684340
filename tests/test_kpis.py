import pytest

from report_builders import balance_sheet, document, profit_and_loss, row, section, summary
from xero_finsight.breakdown import extract_section_breakdown
from xero_finsight.kpis import KpiPolicy, KpiSet, compose_kpis, net_margin
from xero_finsight.report import ReportDocument


def test_end_to_end_scenario() -> None:
    """Standard layout P&L: KPIs and breakdown from one report."""
    pl = document(
        section(
            "Less Operating Expenses",
            summary("Total Operating Expenses", 1000),
            row("Rent", 600),
            row("Software", 400),
        ),
        row("Total Income", 5000),
        row("Net Profit", 4000),
    )

    kpis = compose_kpis(pl, ReportDocument())
    breakdown = extract_section_breakdown(pl, "Less Operating Expenses")

    assert kpis.revenue == pytest.approx(5000.0)
    assert kpis.expenses == pytest.approx(1000.0)
    assert kpis.net_profit == pytest.approx(4000.0)
    assert kpis.net_margin == pytest.approx(80.0)
    assert kpis.cash_balance == 0.0

    assert [(line.name, line.value) for line in breakdown] == [
        ("Rent", 600.0),
        ("Software", 400.0),
    ]
    assert [line.percentage for line in breakdown] == pytest.approx([60.0, 40.0])


def test_cash_balance_from_balance_sheet() -> None:
    kpis = compose_kpis(profit_and_loss(), balance_sheet(bank="12,500.00"))

    assert kpis.cash_balance == pytest.approx(12500.0)


def test_empty_documents_give_zero_kpis() -> None:
    assert compose_kpis(ReportDocument(), ReportDocument()) == KpiSet()


def test_expenses_fall_back_to_generic_labels() -> None:
    """Without the summary row, the generic expense label lookup is used."""
    pl = document(row("Total Income", 800), row("Total Expenses", -300))

    kpis = compose_kpis(pl, ReportDocument())

    assert kpis.expenses == pytest.approx(300.0)
    # No net profit row: derived from revenue - expenses.
    assert kpis.net_profit == pytest.approx(500.0)
    assert kpis.net_margin == pytest.approx(62.5)


def test_negative_net_profit_is_kept() -> None:
    pl = profit_and_loss(income=1000, operating_expenses=1500, net_profit="-500.00")

    kpis = compose_kpis(pl, ReportDocument())

    assert kpis.net_profit == pytest.approx(-500.0)
    assert kpis.net_margin == pytest.approx(-50.0)


def test_net_profit_of_zero_is_treated_as_missing() -> None:
    pl = profit_and_loss(income=1000, operating_expenses=400, net_profit=0)

    kpis = compose_kpis(pl, ReportDocument())

    assert kpis.net_profit == pytest.approx(600.0)


def test_net_margin_without_revenue() -> None:
    assert net_margin(-100.0, 0.0) == 0.0
    assert net_margin(25.0, 100.0) == pytest.approx(25.0)


def test_canonical_and_legacy_revenue_candidates() -> None:
    """The legacy policy accepts "Sales" lines, the canonical one does not."""
    pl = document(section("Trading Income", row("Sales", 700)))

    assert compose_kpis(pl, ReportDocument()).revenue == 0.0
    assert compose_kpis(pl, ReportDocument(), KpiPolicy.legacy()).revenue == pytest.approx(
        700.0
    )


def test_legacy_cash_candidates() -> None:
    bs = document(section("Bank", row("Business Savings Account", 3000)))

    assert compose_kpis(ReportDocument(), bs).cash_balance == 0.0
    assert compose_kpis(ReportDocument(), bs, KpiPolicy.legacy()).cash_balance == 3000.0


def test_invalid_policy_and_missing_documents() -> None:
    with pytest.raises(ValueError):
        KpiPolicy(revenue_candidates=())
    with pytest.raises(TypeError):
        compose_kpis(None, ReportDocument())  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        compose_kpis(ReportDocument(), None)  # type: ignore[arg-type]
