from django.core.exceptions import MiddlewareNotUsed

from core import sentry

# Schemes a continuation token may be presented under
AUTHORIZATION_SCHEMES = ("gnap", "bearer")


class HeadersMiddleware:
    """
    Marks every response uncacheable unless a view said otherwise; grant and
    token responses carry credentials.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, max-age=0"
        return response


class ContinuationTokenMiddleware:
    """
    Adds request.continuation_token if an Authorization header with the GNAP
    (or Bearer) scheme appears. Validating it is the grant service's job.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.continuation_token = None
        auth_header = request.headers.get("authorization", None)
        if auth_header:
            scheme, _, value = auth_header.partition(" ")
            if scheme.lower() in AUTHORIZATION_SCHEMES and value.strip():
                request.continuation_token = value.strip()
        return self.get_response(request)


class SentryTaggingMiddleware:
    """
    Sets Sentry tags at the start of the request if Sentry is configured.
    """

    def __init__(self, get_response):
        if not sentry.SENTRY_ENABLED:
            raise MiddlewareNotUsed()
        self.get_response = get_response

    def __call__(self, request):
        sentry.set_gnap_app("web")
        response = self.get_response(request)
        return response
