import logging

from django.conf import settings

logger = logging.getLogger(__name__)


class GnapError(Exception):
    """
    A problem with a GNAP request that the caller should be told about.

    Each subclass maps onto one of the protocol's error codes and an HTTP
    status; the message is for our logs only and never sent to the caller.
    """

    error_code = "request_denied"
    status_code = 400

    def to_json(self) -> dict[str, str]:
        return {"error": self.error_code}


class InvalidRequestError(GnapError):
    """
    The request was malformed or asked for something nonsensical
    """

    error_code = "invalid_request"


class GrantNotFoundError(InvalidRequestError):
    """
    No grant exists with the given id
    """

    status_code = 404


class ClientAuthenticationError(GnapError):
    """
    The client instance could not be authenticated
    """

    error_code = "invalid_client"
    status_code = 401


class InvalidContinuationError(GnapError):
    """
    The continuation token is not valid for the grant it was presented for
    """

    error_code = "invalid_continuation"
    status_code = 401


class GrantExpiredError(GnapError):
    """
    The grant passed its expiry before it could be continued
    """

    error_code = "request_denied"


class InvalidInteractionError(GnapError):
    """
    The interaction does not exist, has expired, or does not match
    """

    error_code = "invalid_interaction"


class UserDeniedError(GnapError):
    """
    The resource owner refused the grant
    """

    error_code = "user_denied"
    status_code = 403


def capture_exception(exception: BaseException, scope=None, **scope_args):
    """
    Sends the exception to Sentry if it's configured, otherwise just makes
    sure it lands in the logs.
    """
    if settings.SETUP.SENTRY_DSN:
        from sentry_sdk import capture_exception

        capture_exception(exception, scope, **scope_args)
    else:
        logger.error("Unhandled exception", exc_info=exception)
