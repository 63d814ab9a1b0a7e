r"""
Argline argument declarations.

Overview
- Kinds
  • Switch: named, order-independent argument written as "/id:value", "+id" or "-id".
  • Parameter: positional, order-dependent argument consumed by index.
  • Group: cardinality constraint over two or more declared switches.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- Shared (Switch/Parameter)
  • id: str, non-empty after trimming (emptiness is reported by the parser as a
    declaration error before an argument is ever built).
  • description: str, trimmed; empty means "use the id".
  • optional: bool, fixed for the lifetime of the argument.
  • value: one of the values.Numeric / values.String / values.Boolean variants.
- Switch only
  • id must match r"[\w?]+" (letters, digits, underscore or "?"), the only
    spellings the tokenizer can produce.
- Group
  • minimum/maximum: non-negative integers; members: tuple of canonical switch ids.

Mutation
- Only Argument.set() mutates an argument after construction: it marks the argument as
  assigned (always, even when the value is rejected) and forwards the raw token to
  the value variant.
"""
import functools
import operator
import re

from .tokens import IDENTIFIER
from .utils import *
from .values import Value, Boolean


class ArgumentType(type):
    """
    Metaclass that turns argument classes into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - switch(id='age', description='the age', optional=False, ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by switches and parameters.

    - id: must be a string; surrounding whitespace is removed.
    - description: must be a string; surrounding whitespace is removed.
    - value: must be one of the value variants.

    Raises
    - TypeError: for values of the wrong type.
    """
    if not isinstance(id := metadata["id"], str):
        raise TypeError(f"{cls.__typename__} 'id' must be a string")
    metadata["id"] = id.strip()

    if not isinstance(description := metadata["description"], str):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    metadata["description"] = description.strip()

    if not isinstance(metadata["value"], Value):
        raise TypeError(f"{cls.__typename__} 'value' must be a numeric, string or boolean value")


class Argument(metaclass=ArgumentType):
    """
    Common behavior of switches and parameters (not instantiated directly).

    Properties
    - id, optional, assigned, value: read-only mirrors of the backing fields.
    - description: the declared description, or the id when none was given.
    - current: shortcut for value.current.
    """

    __introspectable__ = (
        "id",
        "optional",
        "assigned",
        "value",
    )

    def __init__(self, id, description="", /, value=Unset, *, optional=False):
        metadata = {
            "id": id,
            "description": description,
            "value": value,
            "optional": bool(optional),
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._assigned = False

    @property
    def description(self):
        return self._description or self._id

    @property
    def current(self):
        return self._value.current

    def set(self, token, /):
        """
        Offer a raw token to this argument.

        The argument is marked as assigned whatever the outcome: "assigned" means
        an input was offered, not that a valid input was accepted.

        Returns
        - bool: whether the value variant accepted the token.
        """
        self._assigned = True
        return self._value.set(token)


class Switch(Argument):
    """
    Named, order-independent argument.

    Written as "<marker><id>[<delimiter><value>]" where the marker is the parser's
    switch character, "+" or "-". Boolean switches take no value: the marker is
    the value ("-" is False).
    """

    __introspectable__ = Argument.__introspectable__
    __displayable__ = ("id", "description", "optional", "assigned", "value")

    def __init__(self, id, description="", /, value=Unset, *, optional=False):
        super().__init__(id, description, value, optional=optional)
        if not IDENTIFIER.fullmatch(self.id):
            raise ValueError(f"{type(self).__typename__} ids must contain only letters, digits, '_' or '?'")
        if isinstance(self.value, Boolean) and not self.optional:
            raise TypeError(f"boolean {type(self).__typename__} must be optional")


class Parameter(Argument):
    """
    Positional, order-dependent argument.

    The n-th bare value of the line is offered to the n-th declared parameter.
    Boolean parameters do not exist: booleans are driven by a switch marker.
    """

    __introspectable__ = Argument.__introspectable__
    __displayable__ = ("id", "description", "optional", "assigned", "value")

    def __init__(self, id, description="", /, value=Unset, *, optional=False):
        super().__init__(id, description, value, optional=optional)
        if isinstance(self.value, Boolean):
            raise TypeError(f"{type(self).__typename__} cannot hold a boolean value")


class Group(metaclass=ArgumentType):
    """
    Cardinality constraint over a set of switches.

    After parsing, the number of assigned members must lie in [minimum, maximum].
    The members are the canonical ids of already declared switches; the parser
    resolves and checks them before building the group.
    """

    __introspectable__ = (
        "minimum",
        "maximum",
        "members",
    )

    def __init__(self, minimum, maximum, /, *members):
        for name, bound in (("minimum", minimum), ("maximum", maximum)):
            if isinstance(bound, bool) or not isinstance(bound, int):
                raise TypeError(f"{type(self).__typename__} '{name}' must be an integer")
            if bound < 0:
                raise ValueError(f"{type(self).__typename__} '{name}' cannot be negative")
        self._minimum = minimum
        self._maximum = maximum
        self._members = tuple(members)

    @property
    def redundant(self):
        """
        Whether the group can never fail (no lower bound, upper bound covers every member).
        """
        return self._minimum == 0 and self._maximum >= len(self._members)

    def accepts(self, count, /):
        return self._minimum <= count <= self._maximum

    def describe(self):
        """
        Human-readable range description, used both as usage note and as error message.
        """
        switches = "the %s {%s}" % (pluralize("switch", len(self._members)), ",".join(self._members))
        minimum, maximum = self._minimum, self._maximum

        if minimum == maximum == 1:
            return "exactly one of %s must be used" % switches
        elif minimum == maximum:
            return "exactly %d of %s must be used" % (minimum, switches)
        elif minimum == 1 and maximum == len(self._members):
            return "one or more of %s must be used" % switches
        elif minimum == 0 and maximum == 1:
            return "at most one of %s can be used" % switches
        elif minimum == 0:
            return "at most %d of %s can be used" % (maximum, switches)
        return "between %d and %d of %s must be used" % (minimum, maximum, switches)


__all__ = (
    "Argument",
    "Switch",
    "Parameter",
    "Group",
)

# Not part of the public API.
del ArgumentType
