from decimal import Decimal

import pytest

from carwash_api.services.numerals import amount_in_words, number_to_words


@pytest.mark.parametrize(
    "number,words",
    [
        (0, "CERO"),
        (1, "UNO"),
        (16, "DIECISÉIS"),
        (21, "VEINTIUNO"),
        (45, "CUARENTA Y CINCO"),
        (100, "CIEN"),
        (101, "CIENTO UNO"),
        (555, "QUINIENTOS CINCUENTA Y CINCO"),
        (1000, "MIL"),
        (21000, "VEINTIÚN MIL"),
        (110000, "CIENTO DIEZ MIL"),
        (1_000_000, "UN MILLÓN"),
        (2_500_000, "DOS MILLONES QUINIENTOS MIL"),
        (31_000_000, "TREINTA Y UN MILLONES"),
    ],
)
def test_number_to_words(number, words):
    assert number_to_words(number) == words


def test_fractions_are_truncated():
    assert number_to_words(Decimal("110000.75")) == "CIENTO DIEZ MIL"


def test_excessive_amount():
    assert number_to_words(10**12) == "MONTO EXCESIVO"
    assert amount_in_words(10**12) == "MONTO EXCESIVO"


def test_negative_amount():
    with pytest.raises(ValueError):
        number_to_words(-5)


def test_amount_in_words_appends_currency():
    assert amount_in_words(Decimal("55000")) == "CINCUENTA Y CINCO MIL GUARANÍES"
