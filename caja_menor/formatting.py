"""Formatting utilities for peso amounts and text display."""

from __future__ import annotations


def format_pesos(amount: int, include_sign: bool = True) -> str:
    """Format a peso amount the way es-CO renders COP.

    Thousands are separated with dots and there is no fractional part.

    Example:
        >>> format_pesos(1234567)
        '$ 1.234.567'
        >>> format_pesos(-5000)
        '-$ 5.000'
        >>> format_pesos(5000, include_sign=False)
        '5.000'
    """
    digits = f"{abs(int(amount)):,}".replace(",", ".")
    body = f"$ {digits}" if include_sign else digits
    return f"-{body}" if amount < 0 else body


def format_signed_pesos(amount: int) -> str:
    """Prefix ``+`` for income and ``-`` for expenses."""
    return f"+{format_pesos(amount)}" if amount >= 0 else format_pesos(amount)


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown does not read them as LaTeX."""
    return text.replace("$", "\\$")
