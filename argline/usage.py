"""
Argline usage text, built incrementally as arguments and groups are declared.

Layout
    Usage: prog name /ID:x /age:x [address] [[+|-]female] [/?]

      name·················· the person's name. Values: {Liron Schur|Yossi Samocha}
      /ID··················· the person's ID number. Values: between 0 and
                             999999999
      [address]············· home address. Values: free text; default=
      ...

    NOTES:
     - exactly one of the switches {Native,Arrived} must be used

- The summary line brackets optional items, renders valued switches as
  "/id:x", boolean switches as "[+|-]id" and the usage switch as "/?".
- Each argument block is wrapped to WIDTH columns; continuation lines are
  indented to COLUMN so descriptions stay aligned.
- The text depends only on the declarations, so rendering is idempotent.
"""
from .arguments import Switch
from .values import Boolean

COLUMN = 25
WIDTH = 79
FILLER = "·"  # middle dot

USAGE = "?"


def _wrap(text, /):
    """
    Break one argument block into lines of at most WIDTH characters.

    A line is broken at the last space within its final ten columns, or hard
    at WIDTH when there is none; continuation lines are indented to COLUMN.
    """
    lines = []
    while text:
        if len(text) <= WIDTH:
            lines.append(text)
            break
        for cut in range(WIDTH, WIDTH - 10, -1):
            if text[cut] == " ":
                break
        else:
            cut = WIDTH
        lines.append(text[:cut])
        if text := text[cut:].lstrip():
            text = " " * COLUMN + text
    return lines


class Usage:
    """
    Accumulator for the three usage sections: summary, argument blocks and notes.
    """

    def __init__(self, switch="/", delimiter=":"):
        self._switch = switch
        self._delimiter = delimiter
        self._summary = []
        self._blocks = []
        self._notes = []

    def add(self, argument, /):
        """
        Append the summary fragment and the description block of a new argument.
        """
        switch = isinstance(argument, Switch)

        match argument.value:
            case Boolean() if argument.id == USAGE:
                fragment = label = self._switch + USAGE
            case Boolean():
                fragment = "[+|-]" + argument.id
                label = argument.id
            case _ if switch:
                fragment = self._switch + argument.id + self._delimiter + "x"
                label = self._switch + argument.id
            case _:
                fragment = label = argument.id

        if argument.optional:
            fragment = "[%s]" % fragment
            label = "[%s]" % label
        self._summary.append(fragment)

        block = "  " + label.ljust(COLUMN - 3, FILLER) + " " + argument.description
        if argument.id != USAGE:
            block += ". Values: " + argument.value.describe()
            if argument.optional:
                block += "; default= " + argument.value.render()
        self._blocks.extend(_wrap(block))

    def note(self, group, /):
        self._notes.append(group.describe())

    @property
    def summary(self):
        return "".join(" " + fragment for fragment in self._summary)

    @property
    def blocks(self):
        return tuple(self._blocks)

    @property
    def notes(self):
        return tuple(self._notes)

    def render(self, prog, /, error=None):
        """
        Build the full usage text.

        Parameters
        - prog: the program name printed after "Usage:".
        - error: optional message shown first, prefixed with ">> ".
        """
        text = ""
        if error:
            text = ">> %s\n\n" % error

        text += "Usage: %s%s\n\n" % (prog, self.summary)
        text += "".join(line + "\n" for line in self._blocks) + "\n"
        if self._notes:
            text += "NOTES:\n" + "".join(" - %s\n" % note for note in self._notes)
        return text + "\n"


__all__ = (
    "Usage",
    "COLUMN",
    "WIDTH",
)
