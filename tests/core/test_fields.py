import pytest

from core.fields import DelimitedListField


def test_prep_and_parse():
    field = DelimitedListField()
    assert field.get_prep_value(["read", "write"]) == "read,write"
    assert field.get_prep_value([]) is None
    assert field.get_prep_value(None) is None
    assert field.to_python("read,write") == ["read", "write"]
    assert field.to_python(["a"]) == ["a"]
    assert field.to_python(None) is None
    assert field.from_db_value("a,b,c", None, None) == ["a", "b", "c"]


def test_delimiter_values_refused():
    with pytest.raises(ValueError):
        DelimitedListField().get_prep_value(["has,comma"])
    # A different delimiter makes commas fine
    field = DelimitedListField(delimiter="|")
    assert field.get_prep_value(["has,comma", "b"]) == "has,comma|b"


def test_deconstruct():
    _, _, _, kwargs = DelimitedListField().deconstruct()
    assert "delimiter" not in kwargs
    assert kwargs["null"] is True
    _, _, _, kwargs = DelimitedListField(delimiter="|").deconstruct()
    assert kwargs["delimiter"] == "|"
