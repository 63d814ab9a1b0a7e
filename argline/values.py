"""
Argline value model: the typed payload carried by every argument.

Variants
- Numeric: a float with an inclusive [minimum, maximum] range. Accepts hexadecimal
  literals ("0x1F", case-insensitive prefix, 32-bit two's complement) and general
  decimal/scientific literals ("39", "-2.5", "1e3").
- String: free text, or one of a declared set of choices (compared exactly or
  case-insensitively).
- Boolean: driven by the switch marker, not by a value ("-" is False, anything else True).

Contract
- set(token) -> bool: attempt coercion and validation. Coercion failures leave
  `current` untouched; a lexically valid value is stored even when it is then
  rejected by the range or choice check.
- describe() -> str: short description of the accepted values for the usage text.
- default: the declaration-time value, kept for the usage text.

Consumers treat the three classes as a closed, tagged union and dispatch with
`match value: case Numeric(): ... case String(): ... case Boolean(): ...`.
"""
import math
import re

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

_DECIMAL = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")
_HEXADECIMAL = re.compile(r"[0-9a-fA-F]+")


def _format(number, /):
    """
    Render a float the way the usage text shows it (integral values without ".0").
    """
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


class Value:
    """
    Base class of the value variants (not instantiated directly).
    """
    __slots__ = ("current", "default")
    __match_args__ = ("current",)

    def __init__(self, default, /):
        self.current = default
        self.default = default

    def set(self, token, /):
        raise NotImplementedError

    def describe(self):
        raise NotImplementedError

    def render(self):
        """
        Render the default value for the usage text.
        """
        return str(self.default)

    def __rich_repr__(self):
        yield "current", self.current
        yield "default", self.default

    def __repr__(self):
        return "%s(%s)" % (
            type(self).__name__.lower(),
            ", ".join("%s=%r" % pair for pair in self.__rich_repr__())
        )


class Numeric(Value):
    __slots__ = ("minimum", "maximum")
    __match_args__ = ("current", "minimum", "maximum")

    def __init__(self, default=0, /, minimum=INT_MIN, maximum=INT_MAX):
        for name, number in (("default", default), ("minimum", minimum), ("maximum", maximum)):
            if isinstance(number, bool) or not isinstance(number, int | float):
                raise TypeError(f"numeric '{name}' must be a number")
        if minimum > maximum:
            raise ValueError("numeric 'minimum' cannot be greater than 'maximum'")
        super().__init__(float(default))
        self.minimum = float(minimum)
        self.maximum = float(maximum)

    def set(self, token, /):
        if token.lower().startswith("0x"):
            digits = token[2:]
            if not _HEXADECIMAL.fullmatch(digits):
                return False
            if (number := int(digits, 16)) > 0xFFFFFFFF:
                return False
            # high bit set: two's complement, as a signed 32-bit integer
            if number > INT_MAX:
                number -= 2 ** 32
            number = float(number)
        else:
            if not _DECIMAL.fullmatch(token):
                return False
            if math.isinf(number := float(token)):
                return False

        self.current = number
        return self.minimum <= number <= self.maximum

    def describe(self):
        return "between %s and %s" % (_format(self.minimum), _format(self.maximum))

    def render(self):
        return _format(self.default)

    def __rich_repr__(self):
        yield from super().__rich_repr__()
        yield "minimum", self.minimum
        yield "maximum", self.maximum


class String(Value):
    __slots__ = ("choices", "case_sensitive")
    __match_args__ = ("current", "choices", "case_sensitive")

    def __init__(self, default="", /, *choices, case_sensitive=True):
        if not isinstance(default, str):
            raise TypeError("string 'default' must be a string")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError("string 'choices' must be strings")
            if choice in sanitized:
                raise ValueError("string 'choices' cannot contain duplicates")
            sanitized.append(choice)
        super().__init__(default)
        self.choices = tuple(sanitized)
        self.case_sensitive = bool(case_sensitive)

    def set(self, token, /):
        self.current = token

        # no choices: free text
        if not self.choices:
            return True

        if self.case_sensitive:
            return token in self.choices
        return token.casefold() in (choice.casefold() for choice in self.choices)

    def describe(self):
        if not self.choices:
            return "free text"
        choices = self.choices if self.case_sensitive else (choice.lower() for choice in self.choices)
        return "{%s}" % "|".join(choices)

    def __rich_repr__(self):
        yield from super().__rich_repr__()
        yield "choices", self.choices
        yield "case_sensitive", self.case_sensitive


class Boolean(Value):
    __slots__ = ()

    def __init__(self, default=False, /):
        if not isinstance(default, bool):
            raise TypeError("boolean 'default' must be a bool")
        super().__init__(default)

    def set(self, marker, /):
        self.current = marker != "-"
        return True

    def describe(self):
        return "precede by [+] or [-]"


__all__ = (
    "Value",
    "Numeric",
    "String",
    "Boolean",
    "INT_MIN",
    "INT_MAX",
)
