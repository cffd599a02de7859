import pytest

from pertcalc.domain.validation import (
    MSG_LAMBDA,
    MSG_ORDER,
    MSG_POSITIVE,
    MSG_REQUIRED,
    parse_number,
    to_input,
    validate_form,
)


@pytest.mark.parametrize(
    "raw,expected",
    [(4, 4.0), (2.5, 2.5), ("3", 3.0), (" 3.5 ", 3.5), ("2,5", 2.5), ("-1", -1.0)],
)
def test_parse_number_accepts(raw, expected):
    assert parse_number(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "nan", "inf", float("nan"), True])
def test_parse_number_rejects(raw):
    with pytest.raises(ValueError):
        parse_number(raw)


def test_valid_form():
    res = validate_form(2, 4, 10, 4)
    assert res.ok
    assert res.values == {"O": 2.0, "M": 4.0, "P": 10.0, "lambda": 4.0}
    assert res.messages() == []


def test_equal_values_are_valid():
    assert validate_form(5, 5, 5).ok


@pytest.mark.parametrize("O,M,P", [(5, 4, 10), (2, 11, 10), (10, 4, 2)])
def test_ordering_rule(O, M, P):
    res = validate_form(O, M, P)
    assert not res.ok
    assert res.form_error == MSG_ORDER
    assert res.field_errors == {}


def test_required_fields():
    res = validate_form("", None, 10, None)
    assert res.field_errors == {"O": MSG_REQUIRED, "M": MSG_REQUIRED, "lambda": MSG_REQUIRED}
    # ordering is only checked once all three values are present
    assert res.form_error is None


@pytest.mark.parametrize("bad", [0, -1, 0.001, "x"])
def test_positive_values(bad):
    res = validate_form(bad, 4, 10)
    assert res.field_errors["O"] == MSG_POSITIVE


def test_minimum_value_is_accepted():
    assert validate_form(0.01, 0.01, 0.01).ok


@pytest.mark.parametrize("lam", [0, 0.5, -4])
def test_lambda_minimum(lam):
    res = validate_form(2, 4, 10, lam)
    assert res.field_errors == {"lambda": MSG_LAMBDA}


def test_messages_lists_everything():
    res = validate_form("", 4, 3, 0)
    assert "O: " + MSG_REQUIRED in res.messages()
    assert "lambda: " + MSG_LAMBDA in res.messages()


def test_to_input_builds_estimate_input():
    inp = to_input(validate_form("2", "4", "10", "3"), unit="days", percentiles=[95, 90, 95])
    assert (inp.O, inp.M, inp.P, inp.lam) == (2.0, 4.0, 10.0, 3.0)
    assert inp.unit == "days"
    assert inp.percentiles == (95, 90)


def test_to_input_rejects_invalid_form():
    with pytest.raises(ValueError):
        to_input(validate_form(5, 4, 10))


def test_to_input_rejects_unknown_percentile():
    with pytest.raises(ValueError):
        to_input(validate_form(2, 4, 10), percentiles=[50])


def test_to_input_rejects_unknown_unit():
    with pytest.raises(ValueError):
        to_input(validate_form(2, 4, 10), unit="weeks")  # type: ignore[arg-type]
