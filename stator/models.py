from typing import ClassVar

from django.db import models
from django.db.models import F
from django.utils import timezone
from django.utils.functional import classproperty

from stator.exceptions import ConcurrentTransitionError, InvalidTransitionError
from stator.graph import State, StateGraph


class StateField(models.CharField):
    """
    A special field that automatically gets choices from a state graph
    """

    def __init__(self, graph: type[StateGraph], **kwargs):
        # Sensible default for state length
        kwargs.setdefault("max_length", 100)
        # Add choices and initial
        self.graph = graph
        kwargs["choices"] = self.graph.choices
        kwargs["default"] = self.graph.initial_state.name
        super().__init__(**kwargs)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        kwargs["graph"] = self.graph
        return name, path, args, kwargs

    def get_prep_value(self, value):
        if isinstance(value, State):
            return value.name
        return value


class StatorModel(models.Model):
    """
    A model base class that has a state graph backing it.

    You need to provide a "state" field as an instance of StateField on the
    concrete model yourself. All state changes go through transition_perform
    (or transition_perform_queryset for batches), which refuse transitions
    the graph does not declare. Single-row writes are compare-and-swap on
    state_version, so two writers that loaded the same row cannot both win.
    """

    state: StateField

    # Timestamp fields to bump alongside every state write, since
    # QuerySet.update() does not honour auto_now
    state_touch_fields: ClassVar[list[str]] = []

    # When the state last actually changed, or the date of instance creation
    state_changed = models.DateTimeField(auto_now_add=True)

    # Incremented on every versioned write
    state_version = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True

    @classproperty
    def state_graph(cls) -> type[StateGraph]:
        return cls._meta.get_field("state").graph

    def versioned_update(self, **fields) -> bool:
        """
        Writes the given fields only if nobody has bumped state_version since
        this instance was loaded. Returns if the write happened; on success
        the instance is updated to match the row.
        """
        now = timezone.now()
        for name in self.state_touch_fields:
            fields.setdefault(name, now)
        updated = self.__class__.objects.filter(
            pk=self.pk,
            state_version=self.state_version,
        ).update(state_version=F("state_version") + 1, **fields)
        if not updated:
            return False
        for name, value in fields.items():
            setattr(self, name, value)
        self.state_version += 1
        return True

    def transition_perform(self, state: State | str, **fields) -> bool:
        """
        Transitions the instance to the given state, along with any extra
        field values. Returns False if it was already in that state (and
        nothing was written).
        """
        target = self.state_graph.get(state)
        if self.state == target and not fields:
            return False
        if not self.state_graph.can_transition(self.state, target):
            raise InvalidTransitionError(
                f"Cannot transition {self._meta.label_lower} {self.pk} "
                f"from {self.state} to {target}"
            )
        values = dict(fields, state=target.name)
        if self.state != target:
            values["state_changed"] = timezone.now()
        if not self.versioned_update(**values):
            raise ConcurrentTransitionError(
                f"{self._meta.label_lower} {self.pk} changed state concurrently"
            )
        return True

    @classmethod
    def transition_perform_queryset(
        cls,
        queryset: models.QuerySet,
        state: State | str,
    ) -> int:
        """
        Transitions every instance in the queryset that is allowed to move
        to the given state. Rows already there, or in a state with no
        declared transition to it, are left alone. Returns how many moved.
        """
        target = cls.state_graph.get(state)
        now = timezone.now()
        return queryset.filter(
            state__in=[parent.name for parent in target.parents]
        ).update(
            state=target.name,
            state_changed=now,
            state_version=F("state_version") + 1,
            **{name: now for name in cls.state_touch_fields},
        )
