"""
Argline parser: declare switches and parameters, parse one line, query typed results.

What this module provides
- Parser: the declaration registry, the alias table, the resolver, the group
  validator and the query API, tied together by a three-state lifecycle:

      DECLARING ──parse()──▶ SUCCEEDED
                     └─────▶ FAILED

  Declarations, aliases and groups are accepted only while DECLARING. Queries
  are valid only once SUCCEEDED. A parser parses at most once, whatever the
  outcome of that parse.

Resolution rules
- "?" always requests the usage text (the parse fails with UsageRequested).
- A switch token is substituted through the alias table (exact match), then
  matched by prefix against every declared switch (case-normalized unless the
  parser is case-sensitive): zero matches is an unknown switch, two or more is
  an ambiguous one.
- The n-th bare value goes to the n-th declared parameter.
- Once every token is consumed: required switches, then required parameters,
  then groups (first violation wins).

Quick start
    from argline import Parser

    parser = Parser()
    parser.declare_string_parameter("name", "the person's name")
    parser.declare_numeric_switch("age", "the person's age", minimum=0, maximum=120)
    parser.declare_boolean_switch("female", "is the person a female")

    if parser.parse('"Liron Schur" /age:39 -female'):
        print(parser.get_string_parameter("name"), parser.get_numeric_switch("age"))
    else:
        print(parser.usage())

Design notes
- Programmer errors (DeclarationError) are raised on the spot and never latched.
- User-input errors (ParseFault) never escape parse(): the first one is latched
  and exposed through fault/last_error/usage(); trigger() surfaces it.
"""
import difflib
import enum
import itertools
import os.path
import subprocess
import sys

from .arguments import Switch, Parameter, Group
from .faults import *
from .tokens import tokenize
from .usage import Usage, USAGE
from .utils import *
from .values import *

APPNAME = "__application_name__"


class ParserState(enum.Enum):
    DECLARING = "declaring"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _sanitize_marker(name, char, /):
    """
    Internal: validate a marker character (the switch character or the delimiter).

    A marker is a single character that can never be part of an id or of a quoted
    value: not blank, not a word character, not '?' and not a double quote.
    """
    if not isinstance(char, str):
        raise TypeError(f"parser '{name}' must be a string")
    if len(char) != 1:
        raise ValueError(f"parser '{name}' must be a single character")
    if char.isspace() or char.isalnum() or char in "_?\"":
        raise ValueError(f"parser '{name}' cannot be blank, a word character, '?' or '\"'")
    return char


class Parser:
    r"""
    Declarative command-line parser for "/id:value", "+flag", "-flag" and positional values.

    Parameters
    - switch: str, default "/"
      the switch marker (besides "+" and "-", which are always markers).
    - delimiter: str, default ":"
      the character separating a switch id from its value.
    - case_sensitive: bool, default False
      whether ids are matched case-sensitively; may be toggled while the
      declarations stay unambiguous.
    - prog: str, default basename of sys.argv[0]
      the program name printed after "Usage:".
    - shell, fancy, colorful: bool
      rendering options forwarded to faults.trigger().
    """

    switches = mirror("switches")
    parameters = mirror("parameters")
    groups = mirror("groups")
    aliases = mirror("aliases")
    state = mirror("state")

    def __init__(self, switch="/", delimiter=":", *, case_sensitive=False, prog=Unset, shell=False, fancy=False, colorful=True):
        self._switch = _sanitize_marker("switch", switch)
        self._delimiter = _sanitize_marker("delimiter", delimiter)
        if switch in "+-":
            raise ValueError("parser 'switch' cannot be '+' or '-'")
        if switch == delimiter:
            raise ValueError("parser 'switch' and 'delimiter' must be different")

        if not isinstance(prog := coalesce(prog, os.path.basename(sys.argv[0])), str):
            raise TypeError("parser 'prog' must be a string")
        self.prog = prog

        self._case_sensitive = bool(case_sensitive)
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

        self._switches = []
        self._parameters = []
        self._required = 0
        self._aliases = {}
        self._groups = []
        self._usage = Usage(self._switch, self._delimiter)
        self._state = ParserState.DECLARING
        self._fault = Unset

    def __repr__(self):
        return "parser(switch=%r, delimiter=%r, case_sensitive=%r, state=%s)" % (
            self._switch,
            self._delimiter,
            self._case_sensitive,
            self._state.value
        )

    @property
    def switch(self):
        return self._switch

    @property
    def delimiter(self):
        return self._delimiter

    @property
    def case_sensitive(self):
        return self._case_sensitive

    @case_sensitive.setter
    def case_sensitive(self, value):
        previous, self._case_sensitive = self._case_sensitive, bool(value)
        try:
            for arguments in (self._switches, self._parameters):
                for first, second in itertools.combinations(arguments, 2):
                    self._check_pair(first.id, second.id)
        except DeclarationError:
            self._case_sensitive = previous
            raise

    # -- declaration -----------------------------------------------------------------

    def _normalize(self, id):
        return id if self._case_sensitive else id.casefold()

    def _check_declaring(self):
        if self._state is not ParserState.DECLARING:
            raise ParseStateError("arguments cannot be declared after parsing")

    def _check_pair(self, existing, new):
        first, second = self._normalize(existing), self._normalize(new)
        if first == second:
            raise ArgumentAlreadyDeclaredError(existing)
        if first.startswith(second) or second.startswith(first):
            raise AmbiguousArgumentError(existing, new)

    def _reserved(self, id):
        return isinstance(id, str) and self._normalize(id.strip()) == self._normalize(APPNAME)

    def _check_identifier(self, kind, id):
        if isinstance(id, str):
            if not id.strip():
                raise EmptyIdentifierError(kind)
            if self._reserved(id):
                raise ReservedIdentifierError(APPNAME)

    def _register(self, arguments, argument):
        for existing in arguments:
            self._check_pair(existing.id, argument.id)
        arguments.append(argument)
        self._usage.add(argument)
        return argument

    def _declare_switch(self, id, description, value, optional):
        self._check_declaring()
        self._check_identifier("switch", id)
        return self._register(self._switches, Switch(id, description, value, optional=optional))

    def _declare_parameter(self, id, description, value, optional):
        self._check_declaring()
        self._check_identifier("parameter", id)
        parameter = Parameter(id, description, value, optional=optional)
        if not parameter.optional and len(self._parameters) > self._required:
            raise RequiredAfterOptionalError(parameter.id)
        self._register(self._parameters, parameter)
        if not parameter.optional:
            self._required += 1
        return parameter

    def declare_numeric_switch(self, id, description="", /, *, optional=False, default=0, minimum=INT_MIN, maximum=INT_MAX):
        """
        Declare a switch written as "/id:<number>", accepting decimals and "0x" hexadecimals.
        """
        return self._declare_switch(id, description, Numeric(default, minimum, maximum), optional)

    def declare_string_switch(self, id, description="", /, *choices, optional=False, default="", case_sensitive=True):
        """
        Declare a switch written as "/id:<text>"; when choices are given the text must be one of them.
        """
        return self._declare_switch(id, description, String(default, *choices, case_sensitive=case_sensitive), optional)

    def declare_boolean_switch(self, id, description="", /, *, default=False):
        """
        Declare an (always optional) switch written as "+id", "-id" or "/id".
        """
        return self._declare_switch(id, description, Boolean(default), True)

    def declare_numeric_parameter(self, id, description="", /, *, optional=False, default=0, minimum=INT_MIN, maximum=INT_MAX):
        return self._declare_parameter(id, description, Numeric(default, minimum, maximum), optional)

    def declare_string_parameter(self, id, description="", /, *choices, optional=False, default="", case_sensitive=True):
        return self._declare_parameter(id, description, String(default, *choices, case_sensitive=case_sensitive), optional)

    def declare_alias(self, alias, id, /):
        """
        Make the switch token alias stand for id.

        The alias is substituted verbatim before prefix matching, so it may point to
        an id it is not a prefix of ("s" for "size" while "source" exists). An alias
        equal to its target is ignored; re-declaring an alias replaces its target.
        """
        self._check_declaring()
        if not isinstance(alias, str) or not isinstance(id, str):
            raise TypeError("declare_alias() arguments must be strings")
        if not alias.strip():
            raise EmptyIdentifierError("alias")
        if alias != id:
            self._aliases[alias] = id

    def declare_group(self, minimum, maximum, /, *ids):
        """
        Constrain how many of the switches ids may (or must) be used in one line.

        Raises
        - BadGroupError: fewer than two members, a repeated member, maximum below
          minimum or zero, or minimum above the member count.
        - NoSuchArgumentError: a member is not a declared switch.

        A group that can never fail (minimum 0, maximum covering every member) is
        kept without a usage note and reported with a RedundantGroupWarning.
        """
        self._check_declaring()
        if not all(isinstance(id, str) for id in ids):
            raise TypeError("declare_group() members must be switch ids")
        if len(ids) < 2:
            raise BadGroupError("a group must have at least two members")
        if len(set(map(self._normalize, ids))) != len(ids):
            raise BadGroupError("a group cannot list the same switch twice")

        if maximum < minimum or maximum == 0:
            raise BadGroupError("a group cannot allow between %d and %d appearances" % (minimum, maximum))
        if minimum > len(ids):
            raise BadGroupError("you cannot have %d %s in a group of %d %s" % (
                minimum, pluralize("appearance", minimum), len(ids), pluralize("switch", len(ids))
            ))

        group = Group(minimum, maximum, *(self._find("switch", id, self._switches).id for id in ids))
        self._groups.append(group)

        if group.redundant:
            trigger(RedundantGroupWarning(
                "the group of the switches {%s} can never be violated" % ",".join(group.members),
                title="redundant group",
                code=FaultCode.REDUNDANT_GROUP,
                hint="remove the group or raise its minimum",
                group=group
            ), prog=self.prog, shell=self.shell, fancy=self.fancy, colorful=self.colorful)
        else:
            self._usage.note(group)
        return group

    def reserve_appname(self):
        """
        Treat the first positional value as the application name (idempotent).
        """
        if self._parameters and self._parameters[0].id == APPNAME:
            return
        self._check_declaring()
        for existing in self._parameters:
            self._check_pair(existing.id, APPNAME)
        self._parameters.insert(0, Parameter(APPNAME, "the application's name", String()))
        self._required += 1

    # -- parsing ---------------------------------------------------------------------

    def parse(self, line, /, *, appname=False):
        """
        Parse one raw argument line against the declarations.

        Parameters
        - line: str, the arguments (without the program name unless appname is set).
        - appname: bool, reserve the first positional value as the application name.

        Returns
        - bool: True on success. On failure the first fault is latched (see fault,
          last_error and usage()); values assigned before it are kept.

        Raises
        - ParseStateError: the parser already parsed a line.
        """
        if self._state is not ParserState.DECLARING:
            raise ParseStateError("you cannot parse twice")
        if not isinstance(line, str):
            raise TypeError("parse() argument must be a string")

        if appname:
            self.reserve_appname()
        self._declare_switch(USAGE, "displays this usage string", Boolean(), True)

        try:
            self._consume(line)
            self._check_required()
            self._check_groups()
        except ParseFault as fault:
            self._fault = fault
            self._state = ParserState.FAILED
            return False

        self._state = ParserState.SUCCEEDED
        return True

    def parse_command_line(self, argv=Unset, /):
        """
        Parse the process arguments (sys.argv by default), the first one being the application name.
        """
        return self.parse(subprocess.list2cmdline(list(coalesce(argv, sys.argv))), appname=True)

    def _consume(self, line):
        position = 0
        for index, token in enumerate(tokenize(line, self._switch, self._delimiter), start=1):
            if token.switch:
                self._input_switch(token, index)
            else:
                self._input_parameter(token, position, index)
                position += 1

    def _resolve(self, input, index):
        """
        Map a written (alias-substituted) id to its declared switch by prefix.
        """
        written = self._normalize(input)
        match [switch for switch in self._switches if self._normalize(switch.id).startswith(written)]:
            case []:
                suggestions = difflib.get_close_matches(input, [switch.id for switch in self._switches if switch.id != USAGE], 5)
                try:
                    hint = "did you mean %r? you can also run '%s %s?' to see all switches" % (
                        suggestions[0], self.prog, self._switch
                    )
                except IndexError:
                    hint = "try '%s %s?' to see all available switches" % (self.prog, self._switch)
                raise UnknownSwitchError(
                    "unknown switch %r at %s position" % (input, ordinal(index)),
                    title="unknown switch",
                    code=FaultCode.UNKNOWN_SWITCH,
                    hint=hint,
                    input=input,
                    index=index,
                    suggestions=suggestions
                )
            case [switch]:
                return switch
            case [first, second, *_]:
                raise AmbiguousSwitchError(
                    "switch %r at %s position matches both %r and %r" % (input, ordinal(index), first.id, second.id),
                    title="ambiguous switch",
                    code=FaultCode.AMBIGUOUS_SWITCH,
                    hint="write more of the id to tell them apart",
                    input=input,
                    index=index,
                    candidates=(first.id, second.id)
                )

    def _input_switch(self, token, index):
        if token.id == USAGE:
            raise UsageRequested(
                "usage information requested",
                title="usage",
                code=FaultCode.USAGE_REQUESTED,
                index=index
            )

        switch = self._resolve(self._aliases.get(token.id, token.id), index)

        if switch.assigned:
            trigger(DuplicatedSwitchWarning(
                "switch %r at %s position was already used, its last value wins" % (switch.id, ordinal(index)),
                title="duplicated switch",
                code=FaultCode.DUPLICATED_SWITCH,
                hint="use each switch once",
                argument=switch,
                index=index
            ), prog=self.prog, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

        if isinstance(switch.value, Boolean):
            switch.set(token.marker)
            if token.delimiter or token.value:
                raise FlagAssignmentError(
                    "boolean switch %r at %s position cannot take a value" % (switch.id, ordinal(index)),
                    title="boolean switch cannot take a value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    hint="use '-%s' or '+%s', not '-%s%s'" % (switch.id, switch.id, switch.id, self._delimiter),
                    argument=switch,
                    index=index
                )
        elif not token.delimiter:
            raise MissingDelimiterError(
                "switch %r at %s position is missing the delimiter %r" % (switch.id, ordinal(index), self._delimiter),
                title="missing delimiter",
                code=FaultCode.MISSING_DELIMITER,
                hint="write it as '%s%s%sx'" % (self._switch, switch.id, self._delimiter),
                argument=switch,
                index=index
            )
        elif not switch.set(token.value):
            raise InvalidValueError(
                "switch %r at %s position cannot accept %r as a value" % (switch.id, ordinal(index), token.value),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                hint="expected %s" % switch.value.describe(),
                argument=switch,
                index=index
            )

    def _input_parameter(self, token, position, index):
        if position >= len(self._parameters):
            raise TooManyParametersError(
                "unexpected parameter %r at %s position" % (token.value, ordinal(index)),
                title="too many parameters",
                code=FaultCode.TOO_MANY_PARAMETERS,
                hint="only %d %s can be given" % (len(self._parameters), pluralize("parameter", len(self._parameters))),
                input=token.value,
                index=index
            )

        parameter = self._parameters[position]
        if not parameter.set(token.value):
            raise InvalidParameterError(
                "parameter %r at %s position cannot accept %r as a value" % (parameter.id, ordinal(index), token.value),
                title="invalid parameter",
                code=FaultCode.INVALID_PARAMETER,
                hint="expected %s" % parameter.value.describe(),
                argument=parameter,
                index=index
            )

    def _check_required(self):
        for switch in self._switches:
            if not switch.optional and not switch.assigned:
                raise MissingSwitchError(
                    "required switch %r was not assigned a value" % switch.id,
                    title="missing switch",
                    code=FaultCode.MISSING_SWITCH,
                    hint="add '%s%s%sx'" % (self._switch, switch.id, self._delimiter),
                    argument=switch
                )
        for parameter in self._parameters:
            if not parameter.optional and not parameter.assigned:
                name = "application name" if parameter.id == APPNAME else parameter.id
                raise MissingParameterError(
                    "required parameter %r was not assigned a value" % name,
                    title="missing parameter",
                    code=FaultCode.MISSING_PARAMETER,
                    hint="expected %s" % parameter.value.describe(),
                    argument=parameter
                )

    def _check_groups(self):
        switches = {switch.id: switch for switch in self._switches}
        for group in self._groups:
            count = sum(switches[member].assigned for member in group.members)
            if not group.accepts(count):
                raise GroupRangeError(
                    group.describe(),
                    title="group rule violated",
                    code=FaultCode.GROUP_RANGE,
                    hint="%d of them %s used" % (count, "was" if count == 1 else "were"),
                    group=group,
                    count=count
                )

    # -- outcome ---------------------------------------------------------------------

    @property
    def fault(self):
        return coalesce(self._fault)

    @property
    def last_error(self):
        return str(self._fault) if self._fault else "there was no error"

    def usage(self):
        """
        Render the usage text, prefixed with the latched error (if any).
        """
        return self._usage.render(self.prog, error=self._fault and str(self._fault))

    def trigger(self):
        """
        Surface the latched fault (raised, or printed with the usage text in shell mode).
        """
        if not self._fault:
            return
        trigger(
            self._fault,
            prog=self.prog,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
            usage=self._usage.render(self.prog)
        )

    # -- queries ---------------------------------------------------------------------

    def _find(self, kind, id, arguments):
        if not isinstance(id, str):
            raise TypeError(f"{kind} id must be a string")
        normalized = self._normalize(id)
        for argument in arguments:
            if self._normalize(argument.id) == normalized:
                return argument
        raise NoSuchArgumentError(kind, id)

    def _query(self, kind, id, arguments, variant=Unset):
        if self._state is not ParserState.SUCCEEDED:
            raise ParseStateError("arguments can be queried only after a successful parse")
        if self._reserved(id):
            raise ReservedIdentifierError(APPNAME)
        argument = self._find(kind, id, arguments)
        if variant and not isinstance(argument.value, variant):
            raise ArgumentKindError(kind, argument.id, variant.__name__.lower())
        return argument

    def get_switch(self, id, /):
        return self._query("switch", id, self._switches).current

    def get_numeric_switch(self, id, /):
        return self._query("switch", id, self._switches, Numeric).current

    def get_string_switch(self, id, /):
        return self._query("switch", id, self._switches, String).current

    def get_boolean_switch(self, id, /):
        return self._query("switch", id, self._switches, Boolean).current

    def is_switch_assigned(self, id, /):
        return self._query("switch", id, self._switches).assigned

    def get_parameter(self, id, /):
        return self._query("parameter", id, self._parameters).current

    def get_numeric_parameter(self, id, /):
        return self._query("parameter", id, self._parameters, Numeric).current

    def get_string_parameter(self, id, /):
        return self._query("parameter", id, self._parameters, String).current

    def is_parameter_assigned(self, id, /):
        return self._query("parameter", id, self._parameters).assigned

    def get_parameter_list(self):
        """
        Values of every declared parameter, in declaration order (application name excluded).
        """
        if self._state is not ParserState.SUCCEEDED:
            raise ParseStateError("arguments can be queried only after a successful parse")
        return tuple(parameter.current for parameter in self._parameters if parameter.id != APPNAME)

    def get_switch_list(self):
        """
        (id, value) pairs of every declared switch, "?" included.
        """
        if self._state is not ParserState.SUCCEEDED:
            raise ParseStateError("arguments can be queried only after a successful parse")
        return tuple((switch.id, switch.current) for switch in self._switches)

    @property
    def appname(self):
        if self._state is not ParserState.SUCCEEDED:
            raise ParseStateError("arguments can be queried only after a successful parse")
        if not self._parameters or self._parameters[0].id != APPNAME:
            raise NoSuchArgumentError("parameter", "application name")
        return self._parameters[0].current


__all__ = (
    "Parser",
    "ParserState",
    "APPNAME",
)
