"""Display formatting for amounts and percentages.

Formatting never reads ambient state: every call gets a DisplaySettings value.
Amounts are stored in INR; USD display divides by the exchange rate.
"""

from dataclasses import dataclass

from .utils import parse_amount


CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$"}

WESTERN_UNITS = [(1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")]
INDIAN_UNITS = [(10_000_000, "Cr"), (100_000, "L"), (1_000, "K")]


@dataclass(frozen=True)
class DisplaySettings:
    """Currency and number format used for display."""

    currency: str = "INR"
    number_format: str = "indian"
    exchange_rate: float = 83.5

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS.get(self.currency, self.currency)

    def convert(self, amount_inr: float) -> float:
        """Convert a stored INR amount into the display currency."""
        if self.currency == "USD" and self.exchange_rate > 0:
            return amount_inr / self.exchange_rate
        return amount_inr


def _group_digits(integer: int, number_format: str) -> str:
    digits = str(integer)
    if number_format != "indian" or len(digits) <= 3:
        return f"{integer:,}"
    # 12,34,56,789: last three digits, then pairs
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: float, settings: DisplaySettings, decimals: int = 1) -> str:
    """Compact currency: ₹500, ₹1.5K, ₹2.3L, ₹1.2Cr or $2.3M."""
    value = settings.convert(amount)
    sign = "-" if value < 0 else ""
    abs_value = abs(value)
    units = INDIAN_UNITS if settings.number_format == "indian" else WESTERN_UNITS

    for threshold, suffix in units:
        if abs_value >= threshold:
            return f"{sign}{settings.symbol}{abs_value / threshold:.{decimals}f}{suffix}"
    return f"{sign}{settings.symbol}{abs_value:.0f}"


def format_currency_full(amount: float, settings: DisplaySettings) -> str:
    """Full currency with digit grouping and no decimals: ₹1,50,000."""
    value = settings.convert(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{settings.symbol}{_group_digits(round(abs(value)), settings.number_format)}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Signed percentage: +12.5%, -3.0%, 0.0%."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.{decimals}f}%"


def format_change(
    current: float,
    previous: float,
    settings: DisplaySettings,
    period: str = "last month",
) -> str:
    """Describe a change, e.g. "₹50.0K up from last month"."""
    change = current - previous
    direction = "up" if change >= 0 else "down"
    return f"{format_currency(change, settings)} {direction} from {period}"


def parse_currency_amount(value: str | float | int) -> float:
    """Parse "$50", "₹1,000" or 1000 into a number; unparseable gives 0."""
    return parse_amount(value) or 0.0
