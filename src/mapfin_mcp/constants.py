"""Category tables and policy constants."""


ASSET_CATEGORY_LABELS = {
    "mutual_funds": "Mutual Funds",
    "stocks_india": "Stocks - India",
    "stocks_other": "Stocks - Other",
    "epf": "EPF",
    "ppf": "PPF",
    "fixed_deposits": "Fixed Deposits",
    "digital_assets": "Digital Assets",
    "gold": "Gold",
    "real_estate": "Real Estate",
    "liquid_cash": "Liquid Cash / Bank",
    "forex": "Forex",
    "esops_rsus": "ESOPs / RSUs",
    "p2p_lending": "P2P Lending",
    "owed": "Owed (Money Lent)",
    "debt": "Debt",
}

# Liquid: convertible to cash within days to weeks
ASSET_LIQUIDITY = {
    "mutual_funds": "liquid",
    "stocks_india": "liquid",
    "stocks_other": "liquid",
    "liquid_cash": "liquid",
    "forex": "liquid",
    "digital_assets": "liquid",
    "fixed_deposits": "liquid",  # can break with penalty
    "gold": "liquid",
    "real_estate": "illiquid",
    "esops_rsus": "illiquid",
    "epf": "illiquid",  # locked until retirement
    "ppf": "illiquid",  # 15-year lock-in
    "p2p_lending": "illiquid",
    "owed": "illiquid",
    "debt": "illiquid",
}

EXPENSE_CATEGORY_LABELS = {
    "food_dining": "Food & Dining",
    "groceries": "Groceries",
    "transport_travel": "Transport / Travel",
    "utilities_rent": "Utilities & Rent",
    "subscriptions": "Subscriptions",
    "fitness_health": "Fitness and Health",
    "family_house_supplies": "Family & House Supplies",
    "personal": "Personal",
    "gifts": "Gifts",
    "leisure": "Leisure",
    "other": "Other",
}

# Default emergency-runway status when a budget has no explicit flag
EXPENSE_CATEGORY_CRITICAL = {
    "food_dining": False,
    "groceries": True,
    "transport_travel": True,
    "utilities_rent": True,
    "subscriptions": False,
    "fitness_health": True,
    "family_house_supplies": True,
    "personal": False,
    "gifts": False,
    "leisure": False,
    "other": False,
}

EXPENSE_CATEGORY_COLORS = {
    "food_dining": "#f97316",
    "groceries": "#22c55e",
    "transport_travel": "#3b82f6",
    "utilities_rent": "#8b5cf6",
    "subscriptions": "#ec4899",
    "fitness_health": "#14b8a6",
    "family_house_supplies": "#f59e0b",
    "personal": "#6366f1",
    "gifts": "#ef4444",
    "leisure": "#06b6d4",
    "other": "#64748b",
}

LIABILITY_CATEGORY_LABELS = {
    "home_loan": "Home Loan",
    "car_loan": "Car Loan",
    "personal_loan": "Personal Loan",
    "credit_card": "Credit Card",
    "informal_loan": "Informal Loan",
}

PAYMENT_METHOD_LABELS = {
    "credit_card": "Credit Card",
    "debit_card": "Debit Card",
    "upi": "UPI",
    "transfer": "Transfer",
    "cash": "Cash",
    "digital_wallet": "Digital Wallet",
}

REIMBURSEMENT_STATUS_LABELS = {
    "none": "None",
    "pending": "Pending",
    "reimbursed": "Reimbursed",
}

GOAL_TYPE_LABELS = {
    "net_worth": "Net Worth Target",
    "savings": "Savings Goal",
    "purchase": "Purchase Goal",
}

CHART_COLORS = [
    "#2563eb",
    "#16a34a",
    "#f59e0b",
    "#dc2626",
    "#7c3aed",
    "#8884d8",
    "#82ca9d",
    "#ffc658",
    "#ff7300",
    "#00C49F",
    "#FFBB28",
    "#FF8042",
]

OTHER_COLOR = "#94a3b8"

PERSON_ALL = "all"
