from .resource import Resource  # noqa
