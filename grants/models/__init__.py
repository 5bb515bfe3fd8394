from .grant import GrantRequest, GrantStates  # noqa
