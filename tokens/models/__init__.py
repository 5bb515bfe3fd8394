from .access_token import AccessToken  # noqa
