from django.db import models


class DelimitedListField(models.TextField):
    """
    Stores a list of strings as a single delimiter-joined text column.

    None and the empty list are both stored as NULL and read back as None.
    Values that contain the delimiter cannot be stored losslessly, so they
    are refused rather than silently split.
    """

    def __init__(self, *args, delimiter: str = ",", **kwargs):
        self.delimiter = delimiter
        kwargs.setdefault("blank", True)
        kwargs.setdefault("null", True)
        super().__init__(*args, **kwargs)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        if self.delimiter != ",":
            kwargs["delimiter"] = self.delimiter
        return name, path, args, kwargs

    def from_db_value(self, value, expression, connection):
        if value is None:
            return None
        return value.split(self.delimiter)

    def to_python(self, value):
        if value is None or isinstance(value, list):
            return value
        return value.split(self.delimiter)

    def get_prep_value(self, value):
        if not value:
            return None
        if isinstance(value, str):
            return value
        for item in value:
            if self.delimiter in item:
                raise ValueError(
                    f"Value {item!r} contains the list delimiter {self.delimiter!r}"
                )
        return self.delimiter.join(value)

    def value_to_string(self, obj):
        return self.get_prep_value(self.value_from_object(obj)) or ""
