import logging
from functools import wraps

from django.http import JsonResponse
from pydantic import ValidationError

from core.exceptions import GnapError, capture_exception
from stator.exceptions import TransitionError

logger = logging.getLogger(__name__)


def gnap_view(function):
    """
    Turns errors raised inside a protocol view into GNAP error responses.
    Callers only ever see the error code, never why it happened.
    """

    @wraps(function)
    def inner(request, *args, **kwargs):
        try:
            return function(request, *args, **kwargs)
        except GnapError as e:
            logger.info("%s %s: %s (%s)", request.method, request.path, e.error_code, e)
            return JsonResponse(e.to_json(), status=e.status_code)
        except ValidationError as e:
            logger.info("%s %s: invalid body (%s)", request.method, request.path, e)
            return JsonResponse({"error": "invalid_request"}, status=400)
        except TransitionError as e:
            logger.info("%s %s: %s", request.method, request.path, e)
            return JsonResponse({"error": "request_denied"}, status=409)
        except Exception as e:
            capture_exception(e)
            return JsonResponse({"error": "request_denied"}, status=500)

    # This is for the API only
    inner.csrf_exempt = True

    return inner
