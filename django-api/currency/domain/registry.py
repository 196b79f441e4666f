"""Static ISO 4217 table of the currencies the platform can price in.

Pure lookups, no I/O.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str
    minor_unit: int  # digits after the decimal point, e.g. 2 for cents


_CURRENCIES: dict[str, CurrencyInfo] = {
    info.code: info
    for info in (
        CurrencyInfo("NGN", "₦", "Nigerian Naira", 2),
        CurrencyInfo("USD", "$", "US Dollar", 2),
        CurrencyInfo("EUR", "€", "Euro", 2),
        CurrencyInfo("GBP", "£", "British Pound", 2),
        CurrencyInfo("GHS", "₵", "Ghanaian Cedi", 2),
        CurrencyInfo("KES", "KSh", "Kenyan Shilling", 2),
        CurrencyInfo("ZAR", "R", "South African Rand", 2),
        CurrencyInfo("EGP", "E£", "Egyptian Pound", 2),
        CurrencyInfo("JPY", "¥", "Japanese Yen", 0),
        CurrencyInfo("CNY", "¥", "Chinese Yuan", 2),
        CurrencyInfo("AUD", "A$", "Australian Dollar", 2),
        CurrencyInfo("CAD", "C$", "Canadian Dollar", 2),
        CurrencyInfo("CHF", "CHF", "Swiss Franc", 2),
        CurrencyInfo("SEK", "kr", "Swedish Krona", 2),
        CurrencyInfo("NZD", "NZ$", "New Zealand Dollar", 2),
        CurrencyInfo("INR", "₹", "Indian Rupee", 2),
    )
}


def is_valid_currency(code: str) -> bool:
    return code.upper() in _CURRENCIES


def get_currency(code: str) -> CurrencyInfo | None:
    return _CURRENCIES.get(code.upper())


def currency_symbol(code: str) -> str:
    """Return the display symbol, or the code itself for unknown currencies."""
    info = get_currency(code)
    return info.symbol if info else code.upper()


def currency_name(code: str) -> str:
    info = get_currency(code)
    return info.name if info else code.upper()


def minor_unit(code: str) -> int:
    info = get_currency(code)
    return info.minor_unit if info else 2


def all_currencies() -> list[CurrencyInfo]:
    """Return every registered currency in registry order."""
    return list(_CURRENCIES.values())
