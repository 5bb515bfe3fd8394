import json

from core.exceptions import InvalidRequestError


class FormOrJsonParser:
    """
    If there's form data in a request, makes it into a JSON-like dict.
    Browsers posting consent forms send form data; API clients send JSON.
    """

    def parse_body(self, request) -> dict:
        # Did they submit JSON?
        if request.content_type == "application/json" and request.body.strip():
            try:
                value = json.loads(request.body)
            except json.JSONDecodeError as e:
                raise InvalidRequestError(f"Malformed JSON body: {e}")
            if not isinstance(value, dict):
                raise InvalidRequestError("JSON body must be an object")
            return value
        # Fall back to form data
        value = {}
        for key, item in request.POST.items():
            value[key] = item
        for key, item in request.GET.items():
            value[key] = item
        return value
