import pytest

from xero_finsight.breakdown import ExpenseLine
from xero_finsight.comparison import (
    CategoryChange,
    compare_breakdowns,
    compare_kpis,
    match_by_name,
    percentage_change,
)
from xero_finsight.kpis import KpiSet


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (100, 0, 100.0),
        (0, 0, 0.0),
        (-20, 0, 0.0),
        (50, 100, -50.0),
        (150, 100, 50.0),
        (100, 100, 0.0),
    ],
)
def test_percentage_change(current, previous, expected) -> None:
    assert percentage_change(current, previous) == pytest.approx(expected)


def _lines(*pairs: tuple[str, float]) -> list[ExpenseLine]:
    return [ExpenseLine(name=n, value=v, percentage=0.0) for n, v in pairs]


def test_match_by_name_is_exact_and_case_insensitive() -> None:
    current = _lines(("Rent", 660.0), ("Software", 400.0))
    previous = _lines(("rent", 600.0), ("Software Subscriptions", 400.0))

    rent = match_by_name(current, previous, "RENT")
    assert rent.has_data is True
    assert rent.change == pytest.approx(10.0)

    # "Software" is not a substring match of "Software Subscriptions".
    software = match_by_name(current, previous, "Software")
    assert software == CategoryChange(name="Software", change=0.0, has_data=False)


def test_match_by_name_missing_on_either_side() -> None:
    current = _lines(("Rent", 100.0))

    assert match_by_name(current, [], "Rent").has_data is False
    assert match_by_name([], current, "Rent").has_data is False
    with pytest.raises(ValueError):
        match_by_name(current, current, "")


def test_compare_breakdowns_follows_current_order() -> None:
    current = _lines(("Wages", 900.0), ("Rent", 300.0), ("Travel", 50.0))
    previous = _lines(("Rent", 300.0), ("Wages", 600.0))

    changes = compare_breakdowns(current, previous)

    assert [c.name for c in changes] == ["Wages", "Rent", "Travel"]
    assert changes[0].change == pytest.approx(50.0)
    assert changes[1].change == pytest.approx(0.0)
    assert changes[2].has_data is False


def test_compare_kpis() -> None:
    current = KpiSet(revenue=1200, expenses=500, net_profit=700, net_margin=58, cash_balance=0)
    previous = KpiSet(revenue=1000, expenses=500, net_profit=500, net_margin=50, cash_balance=0)

    changes = {c.name: c for c in compare_kpis(current, previous)}

    assert set(changes) == {"revenue", "expenses", "net_profit", "cash_balance"}
    assert changes["revenue"].change == pytest.approx(20.0)
    assert changes["expenses"].change == pytest.approx(0.0)
    assert changes["net_profit"].change == pytest.approx(40.0)
    assert changes["cash_balance"].change == pytest.approx(0.0)

    assert all(not c.has_data for c in compare_kpis(current, None))
