from .client import Client  # noqa
