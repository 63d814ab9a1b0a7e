"""
Argline faults (errors and warnings) and rendering.

Scope
- DeclarationError and subclasses: programmer errors. Raised immediately by the
  declaration API (and by queries issued in the wrong state); never latched, never
  meant to be shown to end users.
- FaultCode: canonical, stable numeric identifiers for every user-facing parse fault
  and warning. Codes are grouped by domain to keep copy consistent and make
  searches predictable.
- ParseFault / ParseWarning: base types that carry message + options and know
  how to render themselves (rich) in a friendly, lowercased and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

UX goals
- Position-first messages: switch and value faults include the ordinal position of
  the offending token (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.

Integration
- The parser raises ParseFault subclasses internally and latches the first one;
  parse() then returns False and Parser.fault exposes it.
- Outside shell mode a triggered fault is raised; in shell mode it is rendered via
  rich on stderr, followed by the usage text when one is attached.
"""
import inspect
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class DeclarationError(Exception):
    """
    Base class of programmer errors: the declaring code is wrong, not the user input.
    """

    def __init__(self, message, /):
        super().__init__("program error: " + message)


class EmptyIdentifierError(DeclarationError):
    def __init__(self, kind="argument", /):
        super().__init__("you cannot declare a %s with an empty id" % kind)


class ArgumentAlreadyDeclaredError(DeclarationError):
    def __init__(self, id, /):
        super().__init__("argument %r was already declared" % id)
        self.id = id


class AmbiguousArgumentError(DeclarationError):
    def __init__(self, first, second, /):
        super().__init__("declared arguments %r and %r are ambiguous" % (first, second))
        self.ids = (first, second)


class RequiredAfterOptionalError(DeclarationError):
    def __init__(self, id, /):
        super().__init__("an optional parameter cannot be followed by a required one (%r)" % id)
        self.id = id


class BadGroupError(DeclarationError): ...


class NoSuchArgumentError(DeclarationError, LookupError):
    def __init__(self, kind, id, /):
        super().__init__("the %s %r was not declared" % (kind, id))
        self.kind = kind
        self.id = id


class ReservedIdentifierError(DeclarationError):
    def __init__(self, id, /):
        super().__init__("%r is a reserved internal id and must not be used" % id)
        self.id = id


class ArgumentKindError(DeclarationError, TypeError):
    def __init__(self, kind, id, expected, /):
        super().__init__("the %s %r does not hold a %s value" % (kind, id, expected))
        self.kind = kind
        self.id = id


class ParseStateError(DeclarationError): ...


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - switches (211xx)
      • UNKNOWN_SWITCH, AMBIGUOUS_SWITCH, FLAG_ASSIGNMENT, MISSING_DELIMITER,
        INVALID_VALUE, MISSING_SWITCH
    - parameters (212xx)
      • TOO_MANY_PARAMETERS, INVALID_PARAMETER, MISSING_PARAMETER
    - constraints (213xx)
      • GROUP_RANGE
    - usage (214xx)
      • USAGE_REQUESTED
    - warnings (22xxx)
      • DUPLICATED_SWITCH, REDUNDANT_GROUP
    """
    # --- switch errors (211xx) ---
    UNKNOWN_SWITCH      = 21101
    AMBIGUOUS_SWITCH    = 21102
    FLAG_ASSIGNMENT     = 21103
    MISSING_DELIMITER   = 21104
    INVALID_VALUE       = 21105
    MISSING_SWITCH      = 21106

    # --- parameter errors (212xx) ---
    TOO_MANY_PARAMETERS = 21201
    INVALID_PARAMETER   = 21202
    MISSING_PARAMETER   = 21203

    # --- constraint errors (213xx) ---
    GROUP_RANGE         = 21301

    # --- usage (214xx) ---
    USAGE_REQUESTED     = 21401

    # --- warnings (22xxx) ---
    DUPLICATED_SWITCH   = 22101
    REDUNDANT_GROUP     = 22301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(self, kind, palette):
    """
    Shared rich rendering of faults and warnings.

    options used
    - prog, code, title, hint: header and footer pieces.
    - usage: optional usage text appended after the hint.
    - colorful: style the pieces with palette (overridable via __styles__ in __main__).
    - fancy: wrap everything in a Panel titled with the header.
    """
    options = defaultdict(lambda: Unset, self.options)
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if options["colorful"] else "")

    code = options["code"]
    header = Text.assemble(
        "[ ",
        text(options["prog"] or "argline", "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else kind, "code"),
        " | ",
        text(str(options["title"] or kind).title(), "title"),
        " ]"
    )
    message = text(self.message, "message")
    parts = [message]
    if options["hint"]:
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(options["hint"], "hint")))
    if options["usage"]:
        parts.append(text("\n" + options["usage"].rstrip("\n"), "usage"))

    if options["fancy"]:
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class ParseFault(Exception):
    """
    A user-input error found while parsing a line.

    Parse faults never escape Parser.parse(): the first one is latched on the
    parser, which reports failure. Parser.trigger() (or trigger()) surfaces it.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, "error", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "usage": "#8A8A96",
        })

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownSwitchError(ParseFault): ...
class AmbiguousSwitchError(ParseFault): ...
class FlagAssignmentError(ParseFault): ...
class MissingDelimiterError(ParseFault): ...
class InvalidValueError(ParseFault): ...
class MissingSwitchError(ParseFault): ...
class TooManyParametersError(ParseFault): ...
class InvalidParameterError(ParseFault): ...
class MissingParameterError(ParseFault): ...
class GroupRangeError(ParseFault): ...
class UsageRequested(ParseFault): ...


class ParseWarning(Warning):
    """
    A soft issue: reported, never fatal.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, "warning", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicatedSwitchWarning(ParseWarning): ...
class RedundantGroupWarning(ParseWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - outside shell mode, parse faults are raised and warnings go through warnings.warn;
      in shell mode both are rendered on the stderr console.

    typical options
    - prog, shell, fancy, colorful, usage, title, code, hint, and any other
      context the reporter may want to show (e.g., input/index/argument).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "DeclarationError",
    "EmptyIdentifierError",
    "ArgumentAlreadyDeclaredError",
    "AmbiguousArgumentError",
    "RequiredAfterOptionalError",
    "BadGroupError",
    "NoSuchArgumentError",
    "ReservedIdentifierError",
    "ArgumentKindError",
    "ParseStateError",
    "FaultCode",
    "ParseFault",
    "UnknownSwitchError",
    "AmbiguousSwitchError",
    "FlagAssignmentError",
    "MissingDelimiterError",
    "InvalidValueError",
    "MissingSwitchError",
    "TooManyParametersError",
    "InvalidParameterError",
    "MissingParameterError",
    "GroupRangeError",
    "UsageRequested",
    "ParseWarning",
    "DuplicatedSwitchWarning",
    "RedundantGroupWarning",
    "trigger",
)
