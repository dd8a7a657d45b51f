r"""
Ballast argument definitions.

Overview
- Definitions
  • Cardinal: positional argument, bound by position to exactly one token.
  • Option: named argument referenced as --name (or -name) and, optionally, a
    single-character flag (-n). Its arity is one of Arity.FLAG, Arity.SINGLE or
    Arity.APPEND.
  • Arity: cardinality contract of an Option.

- Introspection & representation
  • ArgumentType metaclass provides a stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties (see utils.mirror).

- Builder methods
  • help(text) and default(value) return the definition itself, so declarations
    can be chained: parser.add_positional("file").help("file to read").

Validation highlights
- Cardinal names must match r"\w[a-zA-Z0-9_-]*".
- Option long names must match r"--?[a-zA-Z_][a-zA-Z0-9_-]+"; the reference name is
  the long name without its leading dashes.
- Option flags must match r"-[a-zA-Z_]".
- Cross-definition rules (duplicates, namespace collisions) belong to the parser,
  which is the only place that sees every declaration.

Values
- Definitions hold the raw strings recorded by the parser. They are assigned
  only by the parser and only after a whole parse succeeds.
"""
import functools
import operator
import re
from enum import Enum

from rich.text import Text

from .faults import *
from .utils import *


CARDINAL_NAME_REGEX = r"\w[a-zA-Z0-9_-]*"
OPTION_NAME_REGEX = r"--?([a-zA-Z_][a-zA-Z0-9_-]+)"
FLAG_NAME_REGEX = r"-([a-zA-Z_])"


class Arity(Enum):
    """
    Cardinality contract of an option.

    FLAG    presence-only; recorded as "true"; may be given once.
    SINGLE  exactly one value when present; may be given once.
    APPEND  any number of occurrences, each appending one value in order.
    """
    FLAG = "flag"
    SINGLE = "single"
    APPEND = "append"


class ArgumentType(type):
    """
    Metaclass that turns definitions into introspectable records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the "_" + name attribute.
    - Provide stable, readable __repr__/__rich_repr__ implementations.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

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
            - option(name='filter', flag='f', arity=<Arity.APPEND: 'append'>, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the help text shared by every definition.

    - descr: optional short description. Unset becomes None; a provided string
      must be non-empty after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

    metadata["descr"] = coalesce(descr)


def _sanitize_cardinal_metadata(cls, metadata, /):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not re.fullmatch(CARDINAL_NAME_REGEX, name, re.ASCII):
        raise InvalidNameError("invalid positional argument name '%s'" % name)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize the names of an option.

    Responsibilities
    - names: one long name, or a flag followed by a long name.
        - flag: "-x", a single letter or underscore
        - long: "-name" or "--name", at least two characters after the dashes
    - the long name is reduced to its reference name (dashes stripped) and the
      flag to its single character.

    Raises
    - TypeError: when the names are missing, too many, or not strings.
    - InvalidNameError: when a name does not follow its grammar. The flag is
      checked before the long name.
    """
    names = metadata.pop("names")
    if not names:
        raise TypeError(f"{cls.__typename__} must specify at least one name")
    elif len(names) > 2:
        raise TypeError(f"{cls.__typename__} takes a long name, optionally preceded by a flag")
    elif not all(isinstance(name, str) for name in names):
        raise TypeError(f"{cls.__typename__} names must be strings")

    *flag, long = names

    metadata["flag"] = None
    if flag:
        if not (match := re.fullmatch(FLAG_NAME_REGEX, flag[0])):
            raise InvalidNameError("invalid flag name '%s'" % flag[0])
        metadata["flag"] = match[1]

    if not (match := re.fullmatch(OPTION_NAME_REGEX, long)):
        raise InvalidNameError("invalid optional argument name: %s" % long)
    metadata["name"] = match[1]


def _sanitize_arity_metadata(cls, metadata, /):
    """
    Internal: accept an Arity member or its value ("flag", "single", "append").
    """
    try:
        metadata["arity"] = Arity(metadata["arity"])
    except ValueError:
        raise TypeError(f"{cls.__typename__} 'arity' must be one of 'flag', 'single', or 'append'") from None


class Cardinal(metaclass=ArgumentType):
    """
    Positional argument definition.

    A Cardinal is identified purely by its position among the tokens that do not
    look like options. After a successful parse it holds exactly one raw value.

    Properties
    - name: the declared name, used for retrieval and shown in help.
    - descr: help text or None.
    - declared: declared default or Unset, shown in help (a parsed positional
      always has a value, so it is never read back).
    - value: raw string bound by the last successful parse, or None.
    """

    __introspectable__ = (
        "name",
        "descr",
        "declared",
    )

    def __init__(self, name, /, descr=Unset, default=Unset):
        metadata = {
            "name": name,
            "descr": descr,
        }
        _sanitize_cardinal_metadata(type(self), metadata)
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._declared = default
        self._value = Unset

    @property
    def value(self):
        return coalesce(self._value)

    @property
    def count(self):
        """
        Number of recorded values: 1 once bound, 0 before.
        """
        return int(self._value is not Unset)

    def help(self, text, /):
        """
        Set the help text shown next to this argument.
        """
        metadata = {"descr": text}
        _sanitize_metadata(type(self), metadata)
        self._descr = metadata["descr"]
        return self

    def default(self, value, /):
        self._declared = value
        return self

    def value_at(self, index, /):
        """
        Return the raw value at `index`; a positional only ever has index 0.
        """
        if self._value is Unset or index != 0:
            raise ArgumentIndexError("index %d is out of range for '%s'" % (index, self._name))
        return self._value

    def __cardinal__(self):
        return self


class Option(metaclass=ArgumentType):
    """
    Optional (named) argument definition.

    Highlights
    - Referenced on the command line by "--name" (or "-name") and, when declared,
      by its flag "-n". Retrieval always uses the reference name "name".
    - Arity decides how occurrences are recorded (see Arity).
    - A declared default is used at retrieval time when the option was not given
      and the caller supplies no default of their own.

    Properties
    - name, flag, arity, descr, declared (the declared default or Unset)
    - values: raw strings recorded by the last successful parse, in order.
    """

    __introspectable__ = (
        "name",
        "flag",
        "arity",
        "descr",
        "declared",
        "values",
    )

    def __init__(self, *names, arity=Arity.SINGLE, default=Unset, descr=Unset):
        metadata = {
            "names": names,
            "arity": arity,
            "descr": descr,
        }
        _sanitize_named_metadata(type(self), metadata)
        _sanitize_arity_metadata(type(self), metadata)
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._declared = Unset
        self._values = []

        if default is not Unset:
            self.default(default)

    @property
    def count(self):
        return len(self._values)

    @property
    def exists(self):
        """
        True when the option was given at least once in the last parse.
        """
        return bool(self._values)

    @property
    def placeholder(self):
        """
        Value placeholder shown in help: the upper-cased reference name, or None
        for flags.
        """
        return None if self._arity is Arity.FLAG else self._name.upper()

    def help(self, text, /):
        metadata = {"descr": text}
        _sanitize_metadata(type(self), metadata)
        self._descr = metadata["descr"]
        return self

    def default(self, value, /):
        """
        Declare the value returned when the option is absent.

        Flags already read back as false when absent, so a declared default on a
        flag is redundant; it is honoured but reported with a warning.
        """
        if self._arity is Arity.FLAG:
            trigger(RedundantDefaultWarning(
                "default for flag '%s' is redundant, absent flags read as false" % self._name,
                code=FaultCode.REDUNDANT_DEFAULT,
                argument=self._name,
                stacklevel=4,
            ))
        self._declared = value
        return self

    def value_at(self, index, /):
        if not 0 <= index < len(self._values):
            raise ArgumentIndexError("index %d is out of range for '%s'" % (index, self._name))
        return self._values[index]

    def __option__(self):
        return self


__all__ = (
    # Enumerations
    "Arity",

    # Classes (definitions)
    "Cardinal",
    "Option",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
