from typing import ClassVar


class StateGraph:
    """
    Represents a graph of possible states and the transitions allowed
    between them. Does not support subclasses of existing graphs yet.
    """

    states: ClassVar[dict[str, "State"]]
    choices: ClassVar[list[tuple[object, str]]]
    initial_state: ClassVar["State"]
    terminal_states: ClassVar[set["State"]]

    def __init_subclass__(cls) -> None:
        # Collect state members
        cls.states = {}
        for name, value in cls.__dict__.items():
            if name == "states" or (name.startswith("__") and name.endswith("__")):
                pass
            elif name in ["initial_state", "terminal_states", "choices"]:
                raise ValueError(f"Cannot name a state {name} - this is reserved")
            elif isinstance(value, State):
                value._add_to_graph(cls, name)
            elif callable(value) or isinstance(value, classmethod):
                pass
            else:
                raise ValueError(
                    f"Graph has item {name} of unallowed type {type(value)}"
                )
        # Check the graph layout
        terminal_states = set()
        initial_state = None
        for state in cls.states.values():
            # Check for multiple initial states
            if state.initial:
                if initial_state:
                    raise ValueError(
                        f"The graph has more than one initial state: {initial_state} and {state}"
                    )
                initial_state = state
            if state.terminal:
                terminal_states.add(state)
        if initial_state is None:
            raise ValueError("The graph has no initial state")
        cls.initial_state = initial_state
        cls.terminal_states = terminal_states
        # Generate choices
        cls.choices = [(name, name) for name in cls.states.keys()]

    @classmethod
    def get(cls, name: "str | State") -> "State":
        """
        Resolves a state name (case-insensitively) or State into the graph's
        own State object. Raises KeyError for unknown names.
        """
        if isinstance(name, State):
            name = name.name
        return cls.states[name.lower()]

    @classmethod
    def can_transition(cls, source: "str | State", target: "str | State") -> bool:
        """
        Returns if moving from source to target is a declared transition.
        Staying in the same state is always allowed.
        """
        source_state = cls.get(source)
        target_state = cls.get(target)
        return source_state is target_state or target_state in source_state.children


class State:
    """
    Represents an individual state
    """

    def __init__(self, force_initial: bool = False):
        self.force_initial = force_initial
        self.parents: set["State"] = set()
        self.children: set["State"] = set()

    def _add_to_graph(self, graph: type[StateGraph], name: str):
        self.graph = graph
        self.name = name
        self.graph.states[name] = self

    def __repr__(self):
        return f"<State {self.name}>"

    def __str__(self):
        return self.name

    def __eq__(self, other):
        if isinstance(other, State):
            return self is other
        return self.name == other

    def __hash__(self):
        return hash(id(self))

    def transitions_to(self, other: "State"):
        self.children.add(other)
        other.parents.add(self)

    @property
    def initial(self):
        return self.force_initial or (not self.parents)

    @property
    def terminal(self):
        return not self.children
