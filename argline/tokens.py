r"""
Argline tokenizer: split one raw argument line into switch and value tokens.

Grammar (conceptual)
- switch token: <marker><id>[<delimiter>][<value>]
  • marker: "+", "-" or the parser's switch character (default "/")
  • id: one or more word characters (Unicode letters, digits, connectors) or "?"
  • delimiter: the parser's delimiter character (default ":")
- bare token: <value>
- value: a double-quoted span followed by whitespace, otherwise a maximal run of
  non-whitespace characters (possibly empty after a switch id)

Scanning rules
- The line is trimmed on the left and one trailing space is appended, so every
  value run is terminated by whitespace.
- Tokens are contiguous: each one starts exactly where the previous one ended
  (its trailing whitespace included). The scan stops at the first position where
  no token can start, which is not an error: the rest is left unmatched.
- One pair of wrapping double quotes is stripped from the value.

Examples
    >>> [token.value for token in tokenize('"Liron Schur" /age:39')]
    ['Liron Schur', '39']
    >>> tokenize("-female").__next__()[:4]
    ('-', 'female', '', '')
"""
import re
from typing import NamedTuple

IDENTIFIER = re.compile(r"[\w?]+")


class Token(NamedTuple):
    """
    One match of the scanner.

    Fields
    - marker: "+", "-", the switch character, or "" for a bare value.
    - id: the written switch id, or "" for a bare value.
    - delimiter: the delimiter character when present, else "".
    - value: the value run with wrapping quotes removed ("" when absent).
    - start/end: offsets of the match in the trimmed line (end includes the
      trailing whitespace, so the next token starts at end).
    """
    marker: str
    id: str
    delimiter: str
    value: str
    start: int
    end: int

    @property
    def switch(self):
        return bool(self.id)


def _scan_value(line, position, /):
    """
    Return the end offset of the value run starting at position.
    """
    if line[position] == '"':
        closing = line.find('"', position + 1)
        # the line always ends with a space, so closing + 1 is in range
        if closing != -1 and line[closing + 1].isspace():
            return closing + 1

    end = position
    while not line[end].isspace():
        end += 1
    return end


def _unquote(value, /):
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def tokenize(line, /, switch="/", delimiter=":"):
    """
    Lazily scan a raw argument line into Token tuples.

    Parameters
    - line: str, the raw argument line (without the program name unless the
      caller reserved a parameter for it).
    - switch: the switch marker character (besides "+" and "-").
    - delimiter: the character separating a switch id from its value.

    Yields
    - Token, in input order.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")

    line = line.lstrip() + " "
    markers = {"+", "-", switch}
    position = 0

    while position < len(line):
        start = position
        marker = id = found = ""

        if line[position] in markers:
            if identifier := IDENTIFIER.match(line, position + 1):
                marker, id = line[position], identifier.group()
                position = identifier.end()
                if line[position] == delimiter:
                    found = delimiter
                    position += 1

        end = _scan_value(line, position)

        # a bare token needs a value: only the trailing blank can produce none
        if not id and end == position:
            return

        value = _unquote(line[position:end])

        position = end
        while position < len(line) and line[position].isspace():
            position += 1

        yield Token(marker, id, found, value, start, position)


__all__ = (
    "Token",
    "tokenize",
    "IDENTIFIER",
)
