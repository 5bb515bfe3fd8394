class TransitionError(Exception):
    """
    Base class for problems moving a StatorModel between states
    """


class InvalidTransitionError(TransitionError):
    """
    The requested transition is not declared on the state graph
    """


class ConcurrentTransitionError(TransitionError):
    """
    Someone else changed the row's state since we loaded it
    """
