from datetime import datetime
from typing import Dict, List, Optional

from app.schemas.common import CamelModel


class DateRangeOut(CamelModel):
    start_date: datetime
    end_date: datetime


# ============== Expense Analytics Schemas ==============

class ExpenseSummaryTotals(CamelModel):
    total_amount: float
    total_transactions: int
    average_amount: float
    min_amount: float
    max_amount: float
    previous_total_amount: float
    percentage_change: float


class CategoryTotal(CamelModel):
    category: str
    total: float
    count: int
    average_amount: float


class PaymentTypeTotal(CamelModel):
    payment_type: str
    total: float
    count: int


class DailyExpense(CamelModel):
    date: str  # YYYY-MM-DD
    total: float
    count: int


class ExpenseSummaryResponse(CamelModel):
    period: str
    date_range: DateRangeOut
    summary: ExpenseSummaryTotals
    category_breakdown: List[CategoryTotal]
    payment_type_breakdown: List[PaymentTypeTotal]
    daily_expenses: List[DailyExpense]


class ExpenseTrend(CamelModel):
    period: Dict[str, int]  # e.g. {"year": 2026, "month": 10}
    label: str
    total: float
    count: int
    average: float


class ExpenseTrendsResponse(CamelModel):
    period: str
    trends: List[ExpenseTrend]


class TopCategoriesResponse(CamelModel):
    period: str
    date_range: DateRangeOut
    categories: List[CategoryTotal]


class ExpenseOverallStats(CamelModel):
    total_expenses: int
    total_amount: float
    average_amount: float
    min_amount: float
    max_amount: float
    first_expense_date: Optional[datetime] = None
    latest_expense_date: Optional[datetime] = None


class ExpenseMonthStats(CamelModel):
    total: float
    count: int
    average: float


class ExpenseInsights(CamelModel):
    most_used_payment_type: str
    top_spending_category: str
    top_category_amount: float


class ExpenseStatsResponse(CamelModel):
    overall: ExpenseOverallStats
    this_month: ExpenseMonthStats
    insights: ExpenseInsights


# ============== Body Weight Analytics Schemas ==============

class BodyWeightSummaryTotals(CamelModel):
    total_entries: int
    average_weight: float
    min_weight: float
    max_weight: float
    first_weight: float
    latest_weight: float
    weight_trend: float  # latest - first within the period
    average_body_fat: Optional[float] = None
    average_muscle_mass: Optional[float] = None
    average_bmi: Optional[float] = None
    previous_average_weight: float
    percentage_change: float


class BodyWeightSummaryResponse(CamelModel):
    period: str
    date_range: DateRangeOut
    summary: BodyWeightSummaryTotals


class BodyWeightTrend(CamelModel):
    period: Dict[str, int]
    label: str
    average_weight: float
    min_weight: float
    max_weight: float
    entry_count: int
    average_body_fat: Optional[float] = None
    average_muscle_mass: Optional[float] = None
    average_bmi: Optional[float] = None


class BodyWeightTrendsResponse(CamelModel):
    period: str
    trends: List[BodyWeightTrend]


class WeightEntrySnapshot(CamelModel):
    date: datetime
    weight: float
    unit: str


class UnitBreakdown(CamelModel):
    unit: str
    count: int
    average_weight: float


class BodyWeightStatsResponse(CamelModel):
    total_entries: int
    average_weight: float
    min_weight: float
    max_weight: float
    total_weight_change: float
    average_body_fat: Optional[float] = None
    average_muscle_mass: Optional[float] = None
    average_bmi: Optional[float] = None
    first_entry: Optional[WeightEntrySnapshot] = None
    latest_entry: Optional[WeightEntrySnapshot] = None
    unit_breakdown: List[UnitBreakdown]


# ============== Wholesale Analytics Schemas ==============

class WholesaleSummaryTotals(CamelModel):
    total_batches: int
    total_investment: float
    total_boxes: int
    total_potential_profit: float
    average_investment: float
    average_profit_per_box: float
    max_investment: float
    min_investment: float
    average_cost_per_box: float
    profit_margin_percentage: float
    total_selling_value: float
    previous_total_investment: float
    percentage_change: float


class WholesaleSummaryResponse(CamelModel):
    period: str
    date_range: DateRangeOut
    summary: WholesaleSummaryTotals


class WholesaleTrend(CamelModel):
    period: Dict[str, int]
    label: str
    total_investment: float
    total_boxes: int
    total_profit: float
    batch_count: int


class WholesaleTrendsResponse(CamelModel):
    period: str
    trends: List[WholesaleTrend]


class BatchSnapshot(CamelModel):
    id: str
    date: datetime
    investment_amount: float
    boxes_purchased: int


class WholesaleStatsResponse(CamelModel):
    total_batches: int
    total_investment: float
    total_potential_profit: float
    average_investment_per_batch: float
    total_potential_return: float
    overall_profit_margin: float
    min_investment: float
    max_investment: float
    first_batch: Optional[BatchSnapshot] = None
    latest_batch: Optional[BatchSnapshot] = None


class ProfitTip(CamelModel):
    type: str  # warning | success | info | tip
    title: str
    message: str
