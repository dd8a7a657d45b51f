"""
Ballast parser: declare arguments, match command-line tokens, read typed values.

What this module provides
- Parser: the definition registry and the matching engine of one program.
  • add_positional()/add_optional() declare Cardinal and Option definitions and
    enforce the namespace rules between them.
  • parse() matches an argv-like sequence against the definitions and returns the
    residual vector: the program name followed by every positional token beyond
    the declared ones, in input order.
  • arg()/arg_at()/args()/has_arg()/arg_count() read parsed values back, coerced
    to the requested kind (see ballast.coercion).
  • print_usage()/print_help() render the help text with rich.

Quick start
    from ballast import Parser, Arity, UINT32

    parser = Parser("sort the characters of a string")
    parser.add_positional("string").help("string to sort")
    parser.add_optional("-f", "--filter", arity=Arity.APPEND).help("character to remove")
    parser.add_optional("-i", "--invert", arity=Arity.FLAG).help("sort descending")

    rest = parser.parse()                       # sys.argv
    parser.arg("string")                        # -> str
    parser.args("filter", "char")               # -> list[str]
    parser.arg("invert", bool)                  # -> bool

Matching rules
- "-x" is a flag reference, "-name"/"--name" a long reference; anything else
  (including "-5", "-" and "--") is a positional candidate.
- Flags may be given once. Single options take the next token as their value and
  may be given once. Append options take the next token on every occurrence.
  A value cannot itself look like an option reference.
- The first N positional candidates bind to the N declared positionals; a short
  supply names the first unsatisfied positional.
- "-h/--help" (unless disabled) prints the help text and exits with status 0.

Faults
- Declaration and lookup mistakes raise ConfigurationError subclasses.
- User-input mistakes raise CommandException subclasses whose text is
  "<program-name>: <reason>", the program name being argv[0] of the call.
- Matching is all-or-nothing: a fault leaves every definition as it was.
"""
import copy
import difflib
import os.path
import re
import shlex
import sys
from collections import defaultdict, deque
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .arguments import Arity, Cardinal, Option, FLAG_NAME_REGEX, OPTION_NAME_REGEX
from .coercion import coerce, resolve
from .faults import *
from .faults import trigger as _trigger
from .utils import *


def _classify(token, /):
    """
    Return ("flag", char) or ("long", name) for an option-shaped token, or None.

    Only the shape is checked here, not whether the option exists.
    """
    if match := re.fullmatch(FLAG_NAME_REGEX, token):
        return "flag", match[1]
    if match := re.fullmatch(OPTION_NAME_REGEX, token):
        return "long", match[1]
    return None


def _styled(content, style, /):
    # rich Text keeps its own styling, plain strings take the palette style
    if isinstance(content, Text):
        return content
    return Text(content, style)


class Parser:
    """
    Command-line argument parser for one program.

    Usage steps
    1. Declare arguments with add_positional() and add_optional().
    2. Pass the command-line tokens to parse().
    3. Read each argument back by name with arg(), arg_at() or args().

    Options (keyword-only, except descr)
    - descr: program description shown below the usage line.
    - help: pre-register "-h/--help" (default True).
    - extended_booleans: also read yes/no/on/off as booleans (default False).
    - shell: render user-input faults to stderr and exit with status 1 instead
      of raising them (default False).
    - colorful: style help and fault output with the rich palette (default False).
      The palette can be overridden by a __styles__ mapping in __main__.
    """

    prog = mirror("prog")
    descr = mirror("descr")
    cardinals = mirror("cardinals")
    options = mirror("options")
    flags = mirror("flags")
    extended_booleans = mirror("extended_booleans")
    shell = mirror("shell")
    colorful = mirror("colorful")
    parsed = mirror("parsed")

    def __init__(self, descr=Unset, *, help=True, extended_booleans=False, shell=False, colorful=False):
        if not isinstance(descr, str | Text | Unset):
            raise TypeError("parser 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("parser 'descr' cannot be empty")

        self._prog = None
        self._descr = coalesce(descr)
        self._cardinals = {}
        self._options = {}
        self._flags = {}
        self._extended_booleans = bool(extended_booleans)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._parsed = False
        self._helper = None

        if help:
            self._helper = self.add_optional("-h", "--help", arity=Arity.FLAG, help="display this help text")

    # ==============
    # Registration
    # ==============
    def _check_declarable(self):
        if self._parsed:
            raise ParserStateError("cannot declare arguments after parsing")

    def add_positional(self, name, /, help=Unset):
        """
        Declare a positional argument.

        Positionals bind to tokens in declaration order. The returned Cardinal can
        be used to attach help text: add_positional("file").help("input file").

        Raises
        - InvalidNameError: the name is not of the form \\w[a-zA-Z0-9_-]*.
        - NameConflictError: an optional argument already uses this reference name.
        - DuplicateNameError: a positional with this name already exists.
        """
        self._check_declarable()
        cardinal = Cardinal(name, help)
        if cardinal.name in self._options:
            raise NameConflictError(
                "positional argument name conflicts with optional argument reference name '%s'" % cardinal.name
            )
        if cardinal.name in self._cardinals:
            raise DuplicateNameError("duplicate positional argument name '%s'" % cardinal.name)
        self._cardinals[cardinal.name] = cardinal
        return cardinal

    def add_optional(self, *names, arity=Arity.SINGLE, default=Unset, help=Unset):
        """
        Declare an optional argument.

        Forms
        - add_optional("--long", ...)
        - add_optional("-f", "--long", ...)

        The reference name is the long name without its leading dashes; it is the
        name used in help and for retrieval.

        Parameters
        - arity: Arity member or "flag"/"single"/"append" (default SINGLE).
        - default: value returned when the option is absent and the caller does
          not pass a default of their own.
        - help: help text.

        Raises
        - InvalidNameError: a malformed flag or long name (flag checked first).
        - DuplicateNameError: the flag or the reference name is already declared.
        - NameConflictError: a positional already uses the reference name.
        """
        self._check_declarable()
        option = Option(*names, arity=arity, descr=help)
        if option.flag is not None and option.flag in self._flags:
            raise DuplicateNameError("duplicate flag name '-%s'" % option.flag)
        if option.name in self._cardinals:
            raise NameConflictError(
                "optional argument reference name conflicts with positional argument name '%s'" % option.name
            )
        if option.name in self._options:
            raise DuplicateNameError("duplicate optional argument name '%s'" % option.name)

        if default is not Unset:
            option.default(default)

        self._options[option.name] = option
        if option.flag is not None:
            self._flags[option.flag] = option.name
        return option

    # ==========
    # Matching
    # ==========
    def trigger(self, fault, /, **options):
        """
        Re-target a fault to this parser and surface it.

        The fault receives this parser's program name (unless one is given in
        options) together with its shell/colorful settings, then goes through
        faults.trigger(): raised by default, rendered and exited in shell mode.
        """
        if not hasattr(fault, "__replace__") or not callable(fault.__replace__):
            raise TypeError("trigger() argument must have a __replace__ method")
        options.setdefault("prog", self._prog)
        _trigger(copy.replace(fault, **options, shell=self._shell, colorful=self._colorful))

    def _resolve_token(self, prog, token, index):
        """
        resolve an option-shaped token to the reference name of a declared option.

        returns
        - None when the token does not look like an option (positional candidate).
        - the reference name otherwise.

        faults
        - UnknownSwitchError for an undeclared flag or long name; the closest
          declared spellings are attached as "suggestions".
        """
        if not (shape := _classify(token)):
            return None

        kind, name = shape
        if kind == "flag" and name in self._flags:
            return self._flags[name]
        if kind == "long" and name in self._options:
            return name

        spellings = ["-" + flag for flag in self._flags] + ["--" + name for name in self._options]
        message = "invalid option '%s'" % token
        if self._helper is not None:
            message += ", pass --help to display possible options"
        self.trigger(UnknownSwitchError(
            message,
            code=FaultCode.UNKNOWN_SWITCH,
            input=token,
            index=index,
            suggestions=difflib.get_close_matches(token, spellings, 5),
        ), prog=prog)

    def _parseargs(self, prog, tokens):
        """
        classify and bind tokens without touching any definition.

        phases
        - classification
          • walk the tokens (program name excluded) left to right.
          • option references are resolved by _resolve_token(); flags record "true",
            single/append options consume the following token as their value.
          • everything else is queued as a positional candidate, in order.
        - positional binding
          • a short supply faults on the first unsatisfied positional.

        returns
        - (positionals, occurrences): the candidate list and a mapping from reference
          name to the raw values recorded for it.
        """
        positionals = []
        occurrences = defaultdict(list)
        index = 0

        while tokens:
            token = tokens.popleft()
            index += 1

            if (input := self._resolve_token(prog, token, index)) is None:
                positionals.append(token)
                continue

            option = self._options[input]
            if option is self._helper:
                self._help(prog)

            repeated = input in occurrences
            if option.arity is Arity.FLAG:
                if repeated:
                    self._duplicated(prog, option, token, index)
                occurrences[input].append("true")
                continue

            if not tokens or _classify(tokens[0]):
                self.trigger(OptionValueRequiredError(
                    "'%s' requires a value" % input,
                    code=FaultCode.OPTION_VALUE_REQUIRED,
                    input=token,
                    index=index,
                    argument=option,
                ), prog=prog)
            if option.arity is Arity.SINGLE and repeated:
                self._duplicated(prog, option, token, index)

            occurrences[input].append(tokens.popleft())
            index += 1

        if len(positionals) < len(self._cardinals):
            cardinal = list(self._cardinals.values())[len(positionals)]
            self.trigger(MissingCardinalsError(
                "requires positional argument '%s'" % cardinal.name,
                code=FaultCode.MISSING_CARDINALS,
                argument=cardinal,
                supplied=len(positionals),
            ), prog=prog)

        return positionals, occurrences

    def _duplicated(self, prog, option, token, index):
        self.trigger(DuplicatedSwitchError(
            "'%s' specified more than once" % option.name,
            code=FaultCode.DUPLICATED_SWITCH,
            input=token,
            index=index,
            argument=option,
        ), prog=prog)

    def parse(self, argv=Unset, /):
        """
        Match command-line tokens against the declared arguments.

        Parameters
        - argv:
          • Unset: read sys.argv.
          • str: shell-like string, split with shlex.split.
          • Iterable[str]: argv-like sequence; the first item is the program name.

        Returns
        - list[str]: the program name followed by the positional tokens left over
          after the declared positionals were bound, in input order.

        Behavior
        - On success every definition is (re)assigned: positionals get their token,
          options get the list of their values (possibly empty).
        - On a fault nothing is assigned and the given sequence is never modified.
        - The program name is taken verbatim from the first item and used as the
          prefix of every user-input fault.

        Raises
        - TypeError/ValueError: argv is not a non-empty sequence of strings.
        - CommandException subclasses for user-input faults (unless shell=True).
        """
        if argv is Unset:
            argv = sys.argv
        if isinstance(argv, str):
            argv = shlex.split(argv)
        elif not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")

        tokens = deque(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        if not tokens:
            raise ValueError("parse() argument must start with the program name")

        prog = tokens.popleft()
        positionals, occurrences = self._parseargs(prog, tokens)

        # commit: nothing above this line touches a definition
        self._prog = prog
        for cardinal, value in zip(self._cardinals.values(), positionals):
            cardinal._value = value
        for name, option in self._options.items():
            option._values = list(occurrences.get(name, ()))
        self._parsed = True

        return [prog, *positionals[len(self._cardinals):]]

    # ===========
    # Retrieval
    # ===========
    def _lookup(self, name):
        if not self._parsed:
            raise ParserStateError("arguments have not been parsed yet")
        try:
            return self._options[name]
        except KeyError:
            pass
        try:
            return self._cardinals[name]
        except KeyError:
            raise UnknownArgumentError("no argument by the name '%s'" % name) from None

    def _coerce(self, kind, text, name):
        try:
            return coerce(kind, text, name, extended=self._extended_booleans)
        except InvalidValueError as fault:
            self.trigger(fault)

    def has_arg(self, name, /):
        """
        Tell whether the user supplied the argument (always True for a bound
        positional).
        """
        return self._lookup(name).count > 0

    def arg_count(self, name, /):
        """
        Number of values supplied for the argument: the number of occurrences of
        an option, 1 for a bound positional.
        """
        return self._lookup(name).count

    def arg(self, name, /, kind=str, default=Unset):
        """
        Read the first value of an argument as `kind`.

        See arg_at() for the resolution rules.
        """
        return self.arg_at(name, 0, kind, default)

    def arg_at(self, name, index, /, kind=str, default=Unset):
        """
        Read the value of an argument at `index` as `kind`.

        Resolution
        - a positional, or an option given at least once: the recorded value at
          `index` (ArgumentIndexError when out of range).
        - an absent option: the caller's default, then the declared default, then
          false for flags; otherwise MissingValueError.
        - string defaults are coerced like user input; other defaults are returned
          as they are.

        Raises
        - UnknownArgumentError, ArgumentIndexError, MissingValueError,
          UnsupportedKindError, ParserStateError (configuration errors).
        - InvalidValueError subclasses when the text does not read as `kind`.
        """
        argument = self._lookup(name)
        kind = resolve(kind)

        if isinstance(argument, Cardinal) or argument.exists:
            return self._coerce(kind, argument.value_at(index), argument.name)

        for fallback in (default, argument.declared):
            if fallback is Unset:
                continue
            if isinstance(fallback, str):
                return self._coerce(kind, fallback, argument.name)
            return fallback

        if argument.arity is Arity.FLAG:
            return self._coerce(kind, "false", argument.name)

        raise MissingValueError("no value given for '%s' and no default specified" % argument.name)

    def args(self, name, /, kind=str):
        """
        Read every value of an argument as `kind`, in input order.

        An absent option yields an empty list.
        """
        argument = self._lookup(name)
        return [self.arg_at(name, index, kind) for index in range(argument.count)]

    # =======
    # Help
    # =======
    def _styler(self):
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "description-section": "italic #A3A3A3",  # Neutral gray
            "group-label": "bold #FFFFFF",  # Pure white headers
            "cardinal-name": "bold #FFD600",  # AMBER for positionals
            "option-name": "bold #00E6FF",  # CYAN for options
            "flag-name": "bold #22C55E",  # GREEN for flag options
            "placeholder": "#FFD600",
            "argument-description": "#9CA3AF",  # Muted gray
            "default": "italic #737373",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        return styler

    def _usage(self, prog):
        styler = self._styler()
        usage = Text()
        usage.append("Usage", styler("usage-label")).append(": ")
        usage.append(prog, styler("program-name"))
        if self._options:
            usage.append(" [options]")
        for name in self._cardinals:
            usage.append(" ").append("<%s>" % name, styler("cardinal-name"))
        return usage

    def _render(self, prog):
        """
        Build the full help text.

        Layout
        - usage line, then the description (if any)
        - "Positional arguments:" block, one row per positional
        - "Options:" block, one row per option: "-f, --name NAME" (no placeholder
          for flags)
        - help text starts on a shared column per block; declared defaults are
          appended as "(default: ...)"
        """
        styler = self._styler()
        text = self._usage(prog)

        if self._descr:
            text.append("\n\n").append(_styled(self._descr, styler("description-section")))

        def block(title, rows, minimum):
            # rows: (label Text, descr, declared)
            column = max([minimum] + [len(label) + 2 for label, _, _ in rows])
            text.append("\n\n").append(title, styler("group-label")).append(":")
            for label, descr, declared in rows:
                text.append("\n  ").append(label)
                if descr or declared is not Unset:
                    text.append(" " * (column - len(label)))
                if descr:
                    text.append(_styled(descr, styler("argument-description")))
                if declared is not Unset:
                    text.append(" " * bool(descr)).append("(default: %s)" % (declared,), styler("default"))

        if self._cardinals:
            block("Positional arguments", [
                (Text(cardinal.name, styler("cardinal-name")), cardinal.descr, cardinal.declared)
                for cardinal in self._cardinals.values()
            ], 18)

        if self._options:
            rows = []
            for option in self._options.values():
                style = styler("flag-name" if option.arity is Arity.FLAG else "option-name")
                label = Text()
                if option.flag is not None:
                    label.append("-" + option.flag, style).append(", ")
                label.append("--" + option.name, style)
                if option.placeholder:
                    label.append(" ").append(option.placeholder, styler("placeholder"))
                rows.append((label, option.descr, option.declared))
            block("Options", rows, 28)

        return text

    def _program(self):
        return self._prog or os.path.basename(sys.argv[0])

    def print_usage(self):
        """
        Print the usage line to stdout.
        """
        Console(highlight=False, soft_wrap=True).print(self._usage(self._program()))

    def print_help(self):
        """
        Print the full help text to stdout.
        """
        Console(highlight=False, soft_wrap=True).print(self._render(self._program()))

    def _help(self, prog):
        Console(highlight=False, soft_wrap=True).print(self._render(prog))
        sys.exit(0)


__all__ = (
    "Parser",
)
