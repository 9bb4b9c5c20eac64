"""Spanish cardinal numbers in words, as printed on the 'total en letras' line of an invoice."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

MAX_AMOUNT = 999_999_999_999
EXCESSIVE = "MONTO EXCESIVO"

_UNITS = ["", "UNO", "DOS", "TRES", "CUATRO", "CINCO", "SEIS", "SIETE", "OCHO", "NUEVE"]
_TEENS = [
    "DIEZ", "ONCE", "DOCE", "TRECE", "CATORCE", "QUINCE",
    "DIECISÉIS", "DIECISIETE", "DIECIOCHO", "DIECINUEVE",
]
_TWENTIES = [
    "VEINTE", "VEINTIUNO", "VEINTIDÓS", "VEINTITRÉS", "VEINTICUATRO", "VEINTICINCO",
    "VEINTISÉIS", "VEINTISIETE", "VEINTIOCHO", "VEINTINUEVE",
]
_TENS = ["", "", "VEINTE", "TREINTA", "CUARENTA", "CINCUENTA", "SESENTA", "SETENTA", "OCHENTA", "NOVENTA"]
_HUNDREDS = [
    "", "CIENTO", "DOSCIENTOS", "TRESCIENTOS", "CUATROCIENTOS", "QUINIENTOS",
    "SEISCIENTOS", "SETECIENTOS", "OCHOCIENTOS", "NOVECIENTOS",
]


def _apocope(words: str) -> str:
    # "UNO" shortens before a noun: VEINTIÚN MIL, TREINTA Y UN MILLONES
    if words.endswith("VEINTIUNO"):
        return words[: -len("VEINTIUNO")] + "VEINTIÚN"
    if words.endswith("UNO"):
        return words[:-3] + "UN"
    return words


def _below_hundred(n: int) -> str:
    if n < 10:
        return _UNITS[n]
    if n < 20:
        return _TEENS[n - 10]
    if n < 30:
        return _TWENTIES[n - 20]
    tens, units = divmod(n, 10)
    return _TENS[tens] if units == 0 else f"{_TENS[tens]} Y {_UNITS[units]}"


def _below_thousand(n: int) -> str:
    if n == 100:
        return "CIEN"
    hundreds, rest = divmod(n, 100)
    parts = [p for p in (_HUNDREDS[hundreds], _below_hundred(rest)) if p]
    return " ".join(parts)


def _below_million(n: int) -> str:
    thousands, rest = divmod(n, 1000)
    parts = []
    if thousands == 1:
        parts.append("MIL")
    elif thousands > 1:
        parts.append(f"{_apocope(_below_thousand(thousands))} MIL")
    if rest:
        parts.append(_below_thousand(rest))
    return " ".join(parts)


# PUBLIC_INTERFACE
def number_to_words(number: Union[int, Decimal, float]) -> str:
    """
    Convert a non-negative whole amount to uppercase Spanish words.

    Fractions are truncated (guaraníes have no cents). Amounts above
    MAX_AMOUNT yield 'MONTO EXCESIVO'.
    """
    n = int(number)
    if n < 0:
        raise ValueError("Amount cannot be negative")
    if n == 0:
        return "CERO"
    if n > MAX_AMOUNT:
        return EXCESSIVE

    millions, rest = divmod(n, 1_000_000)
    parts = []
    if millions == 1:
        parts.append("UN MILLÓN")
    elif millions > 1:
        parts.append(f"{_apocope(_below_million(millions))} MILLONES")
    if rest:
        parts.append(_below_million(rest))
    return " ".join(parts)


# PUBLIC_INTERFACE
def amount_in_words(amount: Union[int, Decimal, float], currency: str = "GUARANÍES") -> str:
    """Amount in words followed by the currency name, e.g. 'CIENTO DIEZ MIL GUARANÍES'."""
    words = number_to_words(amount)
    if words == EXCESSIVE:
        return words
    return f"{words} {currency}"
