"""
Formatting utilities.
"""


def format_currency(amount: int, currency: str = "GBP") -> str:
    """
    Format an integer amount as currency.

    Args:
        amount: The amount in whole units (e.g., pounds, not pence).
        currency: Currency code (default GBP).

    Returns:
        Formatted currency string.
    """
    symbols = {
        "GBP": "£",
        "USD": "$",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    return f"{symbol}{amount:,}"


def format_percent(fraction: float, decimals: int = 1) -> str:
    """
    Format a fraction as a percentage (0.034 -> "3.4%").

    Args:
        fraction: The value as a fraction of 1.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{fraction * 100:.{decimals}f}%"


def format_score(score: int, scale: int = 999) -> str:
    """Format a composite score against its scale ("742/999")."""
    return f"{score}/{scale}"
