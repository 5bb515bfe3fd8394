from contextlib import contextmanager

import sentry_sdk
from django.conf import settings

SENTRY_ENABLED = bool(settings.SETUP.SENTRY_DSN)


def noop(*args, **kwargs):
    pass


@contextmanager
def noop_context(*args, **kwargs):
    yield


if SENTRY_ENABLED:
    set_tag = sentry_sdk.set_tag
    start_transaction = sentry_sdk.start_transaction
else:
    set_tag = noop
    start_transaction = noop_context


def set_gnap_app(name: str):
    set_tag("gnap.app", name)
