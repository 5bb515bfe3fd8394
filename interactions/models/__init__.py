from .interaction import Interaction  # noqa
