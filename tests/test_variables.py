import pytest

from raildev.variables import Variable, parse_variable


def test_simple_pair():
    assert parse_variable("KEY=value") == Variable(key="KEY", value="value")


def test_splits_on_first_equals_only():
    var = parse_variable("URL=postgres://host/db?opt=1")
    assert var.key == "URL"
    assert var.value == "postgres://host/db?opt=1"


@pytest.mark.parametrize("text", ["KEY", "=value", "KEY=", "=", ""])
def test_invalid_formats(text):
    with pytest.raises(ValueError, match="Invalid variable format"):
        parse_variable(text)


def test_error_message_echoes_input():
    with pytest.raises(ValueError) as info:
        parse_variable("KEY=")
    assert str(info.value) == "Invalid variable format: KEY="