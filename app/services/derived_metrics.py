"""Per-record derived fields. Pure functions, no I/O.

Wholesale helpers take the three stored quantities directly so they work on
ORM rows, request payloads and aggregation inputs alike. A batch with zero
(or missing) boxes has no cost per box; every dependent metric is then None
rather than raising ZeroDivisionError.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional


def round_half_up(value: float, digits: int = 2) -> float:
    """Round with ties away from zero, so 72.25 becomes 72.3 and 0.125 becomes 0.13."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def cost_per_box(investment_amount: float, boxes_purchased: Optional[int]) -> Optional[float]:
    if not boxes_purchased:
        return None
    return investment_amount / boxes_purchased


def total_potential_profit(boxes_purchased: int, profit_per_box: float) -> float:
    return boxes_purchased * profit_per_box


def profit_margin(
    investment_amount: float,
    boxes_purchased: Optional[int],
    profit_per_box: float,
) -> Optional[float]:
    """Profit per box as a percentage of cost per box."""
    cost = cost_per_box(investment_amount, boxes_purchased)
    if not cost:
        return None
    return profit_per_box / cost * 100


def format_margin(margin: Optional[float]) -> Optional[str]:
    """Display form of a margin, always two decimals (e.g. "100.00")."""
    if margin is None:
        return None
    return f"{round_half_up(margin, 2):.2f}"


def selling_price_per_box(
    investment_amount: float,
    boxes_purchased: Optional[int],
    profit_per_box: float,
) -> Optional[float]:
    cost = cost_per_box(investment_amount, boxes_purchased)
    if cost is None:
        return None
    return cost + profit_per_box


def total_selling_value(
    investment_amount: float,
    boxes_purchased: Optional[int],
    profit_per_box: float,
) -> Optional[float]:
    price = selling_price_per_box(investment_amount, boxes_purchased, profit_per_box)
    if price is None:
        return None
    return boxes_purchased * price


def batch_potential_profit(batch: Any) -> float:
    """boxes * profit_per_box for a stored batch, used as an aggregation field."""
    return total_potential_profit(batch.boxes_purchased, batch.profit_per_box)


def batch_cost_per_box(batch: Any) -> Optional[float]:
    return cost_per_box(batch.investment_amount, batch.boxes_purchased)


def formatted_weight(weight: float, unit: str) -> str:
    return f"{round_half_up(weight, 1):.1f} {unit}"


def month_year(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def _group_indian(integer_part: str) -> str:
    # 1234567 -> 12,34,567
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def formatted_amount(amount: float, symbol: str = "₹") -> str:
    """Rupee amount with Indian digit grouping, e.g. ₹1,23,456.70."""
    sign = "-" if amount < 0 else ""
    integer_part, fraction = f"{round_half_up(abs(amount), 2):.2f}".split(".")
    return f"{sign}{symbol}{_group_indian(integer_part)}.{fraction}"
