"""
Ballast faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
- ConfigurationError: programmer mistakes made while declaring or querying
  arguments. Never caught by the library; the message is prefixed with the
  library marker ("ballast: ...").
- CommandException / CommandWarning: user-input faults that carry a message and
  read-only options and know how to render themselves as a single line
  "<program-name>: <reason>".
- trigger(): central entry point to surface a fault (raise it, or render it and
  exit when running in shell mode).

Integration
- The matching engine and the typed accessors build faults without knowing the
  program name; Parser.trigger() re-targets them with copy.replace(fault, prog=...)
  before surfacing, so one fault type serves every parser instance.
"""
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

console = Console(stderr=True, highlight=False)

PREFIX = "ballast"


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - switches (options/flags) (1111x)
      • UNKNOWN_SWITCH, DUPLICATED_SWITCH, OPTION_VALUE_REQUIRED
    - positionals (cardinals) (1112x)
      • MISSING_CARDINALS
    - values (coercion) (1115x)
      • INVALID_BOOLEAN, INVALID_CHARACTER, INVALID_INTEGRAL, INVALID_FLOATING,
        OUT_OF_RANGE
    - warnings (121xx)
      • REDUNDANT_DEFAULT
    """
    # --- switch/flag/option errors (11xxx) ---
    UNKNOWN_SWITCH              = 11112
    DUPLICATED_SWITCH           = 11115
    OPTION_VALUE_REQUIRED       = 11117

    # --- positional/cardinal errors (11xxx) ---
    MISSING_CARDINALS           = 11125

    # --- value errors (11xxx) ---
    INVALID_BOOLEAN             = 11151
    INVALID_CHARACTER           = 11152
    INVALID_INTEGRAL            = 11153
    INVALID_FLOATING            = 11154
    OUT_OF_RANGE                = 11155

    # --- warnings (12xxx) ---
    REDUNDANT_DEFAULT           = 12113


class ConfigurationError(Exception):
    """
    Misuse of the declaration or retrieval API.

    These signal a programmer mistake (bad names, duplicates, namespace
    collisions, unknown argument lookups) and are not meant to be recovered
    from. The rendered message carries the library marker instead of the
    program name so it cannot be mistaken for a user-input fault.
    """

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return "%s: %s" % (PREFIX, self.message)


class InvalidNameError(ConfigurationError, ValueError): ...
class DuplicateNameError(ConfigurationError, ValueError): ...
class NameConflictError(ConfigurationError, ValueError): ...
class UnknownArgumentError(ConfigurationError, LookupError): ...
class MissingValueError(ConfigurationError, LookupError): ...
class ArgumentIndexError(ConfigurationError, IndexError): ...
class ParserStateError(ConfigurationError, RuntimeError): ...
class UnsupportedKindError(ConfigurationError, TypeError): ...


def _styles():
    main = __import__("__main__")
    return defaultdict(str, {
        "prog-name": "bold #E6E6F0",  # near-white program name
        "separator": "#6B6F7A",
        "error-message": "#FF4DA6",  # friendly pinky reason
        "warning-message": "#FFB400",  # amber reason for warnings
    } | getattr(main, "__styles__", {}))


class _Fault:
    """
    Message plus read-only keyword options, shared by exceptions and warnings.

    A fault is built where the problem is detected, with the reason as message
    and any context as keyword options (code, input, index, argument, ...).
    copy.replace() derives a new fault of the same type with some options
    overridden; the parser uses it to attach "prog", "shell" and "colorful".
    """

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def prog(self):
        return self.options.get("prog")

    @property
    def code(self):
        return self.options.get("code")

    def __replace__(self, **overrides):
        return type(self)(self.message, **(dict(self.options) | overrides))


class CommandException(_Fault, Exception):
    """
    Base class for user-input faults.

    Until a program name is supplied through the "prog" option the fault
    renders the bare reason.
    """

    def __str__(self):
        if self.prog is None:
            return str(self.message)
        return "%s: %s" % (self.prog, self.message)

    def __rich__(self):
        styles = _styles()
        colorful = self.options.get("colorful", False)

        def styler(style):
            return styles[style] if colorful else ""

        if self.prog is None:
            return Text(str(self.message), styler("error-message"))
        return Text.assemble(
            (self.prog, styler("prog-name")),
            (": ", styler("separator")),
            (str(self.message), styler("error-message")),
        )

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)


class UnknownSwitchError(CommandException): ...
class DuplicatedSwitchError(CommandException): ...
class OptionValueRequiredError(CommandException): ...
class MissingCardinalsError(CommandException): ...


class InvalidValueError(CommandException):
    """
    A stored value that cannot be read back as the requested kind.
    """


class InvalidBooleanError(InvalidValueError): ...
class InvalidCharacterError(InvalidValueError): ...
class InvalidIntegralError(InvalidValueError): ...
class InvalidFloatingError(InvalidValueError): ...
class OutOfRangeError(InvalidValueError): ...


class CommandWarning(_Fault, Warning):
    """
    Base class for user-facing warnings; rendered with the library marker.
    """

    def __str__(self):
        return "%s: %s" % (PREFIX, self.message)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        return Text(str(self), _styles()["warning-message"] if colorful else "")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        console.print(self)


class RedundantDefaultWarning(CommandWarning): ...


def trigger(fault, /):
    """
    surface a fault.

    contract
    - fault must provide __trigger__ (see CommandException / CommandWarning).
    - outside shell mode exceptions are raised and warnings are emitted through
      the warnings module; in shell mode both are rendered with rich on stderr
      and exceptions terminate the process with status 1.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must have a __trigger__ method")
    fault.__trigger__()


__all__ = (
    "FaultCode",
    "ConfigurationError",
    "InvalidNameError",
    "DuplicateNameError",
    "NameConflictError",
    "UnknownArgumentError",
    "MissingValueError",
    "ArgumentIndexError",
    "ParserStateError",
    "UnsupportedKindError",
    "CommandException",
    "UnknownSwitchError",
    "DuplicatedSwitchError",
    "OptionValueRequiredError",
    "MissingCardinalsError",
    "InvalidValueError",
    "InvalidBooleanError",
    "InvalidCharacterError",
    "InvalidIntegralError",
    "InvalidFloatingError",
    "OutOfRangeError",
    "CommandWarning",
    "RedundantDefaultWarning",
    "trigger",
)
