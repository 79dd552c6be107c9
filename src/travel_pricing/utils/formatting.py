"""
Presentation helpers for currency amounts.

The engine returns unrounded floats; rounding to a currency's minor unit
happens only here, at display time.
"""

# Currencies quoted without a minor unit
ZERO_DECIMAL_CURRENCIES = {'JPY', 'KRW', 'VND', 'IDR', 'CLP', 'ISK', 'UGX', 'XOF', 'XAF'}

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'INR': '₹',
    'THB': '฿',
    'SGD': 'S$',
    'AED': 'د.إ',
    'MYR': 'RM',
    'JPY': '¥',
}


def currency_decimals(currency: str) -> int:
    """Number of decimal places displayed for a currency."""
    return 0 if str(currency).upper() in ZERO_DECIMAL_CURRENCIES else 2


def round_currency(amount: float, currency: str) -> float:
    """Round an amount to the display precision of its currency."""
    return round(float(amount), currency_decimals(currency))


def format_currency(amount: float, currency: str) -> str:
    """Format an amount with symbol and thousands separators, e.g. '฿8,800.00'."""
    code = str(currency).upper()
    decimals = currency_decimals(code)
    symbol = CURRENCY_SYMBOLS.get(code)
    text = f"{round_currency(amount, code):,.{decimals}f}"
    if symbol:
        return f"{symbol}{text}"
    return f"{code} {text}"
