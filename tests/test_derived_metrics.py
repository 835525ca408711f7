from datetime import datetime

from app.services import derived_metrics as dm


def test_wholesale_figures_for_standard_batch():
    assert dm.cost_per_box(1000, 50) == 20
    assert dm.total_potential_profit(50, 20) == 1000
    assert dm.profit_margin(1000, 50, 20) == 100
    assert dm.format_margin(dm.profit_margin(1000, 50, 20)) == "100.00"
    assert dm.selling_price_per_box(1000, 50, 20) == 40
    assert dm.total_selling_value(1000, 50, 20) == 2000


def test_zero_boxes_has_no_per_box_figures():
    assert dm.cost_per_box(1000, 0) is None
    assert dm.profit_margin(1000, 0, 20) is None
    assert dm.format_margin(None) is None
    assert dm.selling_price_per_box(1000, 0, 20) is None
    assert dm.total_selling_value(1000, 0, 20) is None


def test_zero_investment_has_no_margin():
    assert dm.cost_per_box(0, 10) == 0
    assert dm.profit_margin(0, 10, 20) is None


def test_formatted_amount_uses_indian_grouping():
    assert dm.formatted_amount(0) == "₹0.00"
    assert dm.formatted_amount(999.5) == "₹999.50"
    assert dm.formatted_amount(1234567.891) == "₹12,34,567.89"
    assert dm.formatted_amount(100000) == "₹1,00,000.00"
    assert dm.formatted_amount(-2500) == "-₹2,500.00"


def test_weight_and_month_labels():
    assert dm.formatted_weight(72.3, "kg") == "72.3 kg"
    assert dm.formatted_weight(160, "lbs") == "160.0 lbs"
    assert dm.month_year(datetime(2026, 3, 9)) == "2026-03"


def test_round_half_up_breaks_ties_away_from_zero():
    assert dm.round_half_up(72.25, 1) == 72.3
    assert dm.round_half_up(0.125, 2) == 0.13
    assert dm.round_half_up(2.675, 2) == 2.68
    assert dm.round_half_up(-2.45, 1) == -2.5
    assert dm.round_half_up(1250.456, 2) == 1250.46
    assert dm.round_half_up(10, 2) == 10.0
    assert dm.formatted_amount(0.125) == "₹0.13"
    assert dm.formatted_weight(72.25, "kg") == "72.3 kg"
