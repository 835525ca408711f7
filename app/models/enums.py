from enum import Enum


class Currency(str, Enum):
    INR = "INR"


class PaymentType(str, Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"


class ExpenseCategory(str, Enum):
    FOOD = "food"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    BILLS = "bills"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    TRAVEL = "travel"
    GROCERIES = "groceries"
    FUEL = "fuel"
    RENT = "rent"
    UTILITIES = "utilities"
    INSURANCE = "insurance"
    INVESTMENT = "investment"
    CHARITY = "charity"
    OTHER = "other"


class RecurringType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class WeightUnit(str, Enum):
    KG = "kg"
    LBS = "lbs"


CATEGORY_LABELS = {
    ExpenseCategory.FOOD: "Food & Dining",
    ExpenseCategory.TRANSPORTATION: "Transportation",
    ExpenseCategory.ENTERTAINMENT: "Entertainment",
    ExpenseCategory.SHOPPING: "Shopping",
    ExpenseCategory.BILLS: "Bills & Payments",
    ExpenseCategory.HEALTHCARE: "Healthcare",
    ExpenseCategory.EDUCATION: "Education",
    ExpenseCategory.TRAVEL: "Travel",
    ExpenseCategory.GROCERIES: "Groceries",
    ExpenseCategory.FUEL: "Fuel",
    ExpenseCategory.RENT: "Rent",
    ExpenseCategory.UTILITIES: "Utilities",
    ExpenseCategory.INSURANCE: "Insurance",
    ExpenseCategory.INVESTMENT: "Investment",
    ExpenseCategory.CHARITY: "Charity",
    ExpenseCategory.OTHER: "Other",
}

PAYMENT_TYPE_LABELS = {
    PaymentType.CASH: "Cash",
    PaymentType.CARD: "Card",
    PaymentType.UPI: "UPI",
}
