r"""
declopt option declarations.

Overview
- Option[_T]: one declared, independently trackable setting of a fixed Kind.
  • identity and help: name, spellings, descr
  • policy: required or default, validity check, numeric target (bits/signed or precision)
  • lifecycle: OptionState.UNSET → OptionState.SET, back to UNSET only via reset()
- OptionSet: ordered collection of Options sharing one Kind; first match wins.
- Factories: switch(), integer(), decimal(), text() build Options of each kind;
  manual() builds a text Option with a custom converter.
- Section: a help heading grouping the options declared after it.

Matching
- switches match a token exactly equal to one of their spellings.
- value-bearing options match a token starting with one of their spellings; the
  rest of the token is the value. A token equal to the spelling still matches and
  is reported as a missing value when assigned.

Faults as values
- assign() and validate() never raise for user input: they return the fault
  (a ParserFault) or None. The Parser decides whether a fault aborts the pass.

Quick example:
    >>> count = integer("count", "--count=", "-c", descr="how many", default=1)
    >>> count.match("--count=4")
    True
    >>> count.assign("--count=4") is None
    True
    >>> count.value
    4
"""
import functools
import operator
import re
from enum import Enum

from rich.text import Text

from .coercion import coerce
from .faults import CoercionError, DuplicateOptionError, RequiredMissingError, ValueNotAllowedError, OptionNotFoundError
from .kinds import Kind, integer_bounds, decimal_bounds
from .utils import *


class OptionState(Enum):
    """
    two-state lifecycle of an option within one parse pass.
    """
    UNSET = "unset"
    SET = "set"

    def __repr__(self):
        return f"OptionState.{self.name}"


@rename("always")
def _always(value, /):
    return True


class OptionType(type):
    """
    Metaclass giving option classes stable, introspectable representations.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private backing field "_{name}".
    - Derive __typename__ from the class name ("OptionSet" → "option-set") for
      messages.
    - Provide __repr__/__rich_repr__ over __displayable__ (or __introspectable__).
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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by every kind.

    - name: non-empty string (trimmed).
    - spellings: at least one, each a non-empty string, no duplicates; order kept.
    - descr: string, defaults to "".
    - required: bool; a required option cannot also declare a default.
    - check: callable, defaults to an always-true predicate.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if not metadata["spellings"]:
        raise TypeError(f"{cls.__typename__} {name!r} must specify at least one spelling")
    spellings = []
    for spelling in metadata["spellings"]:
        if not isinstance(spelling, str):
            raise TypeError(f"{cls.__typename__} {name!r} spellings must be strings")
        elif not spelling:
            raise ValueError(f"{cls.__typename__} {name!r} spellings cannot be empty-strings")
        elif spelling in spellings:
            raise ValueError(f"{cls.__typename__} {name!r} spellings cannot contain duplicates")
        spellings.append(spelling)
    metadata["spellings"] = spellings

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} 'descr' must be a string")
    metadata["descr"] = coalesce(descr, "").strip()

    metadata["required"] = bool(metadata["required"])
    if metadata["required"] and metadata["default"] is not Unset:
        raise TypeError(f"required {cls.__typename__} {name!r} cannot have a default")

    if not callable(check := coalesce(metadata["check"], _always)):
        raise TypeError(f"{cls.__typename__} {name!r} 'check' must be callable")
    metadata["check"] = check


def _sanitize_target_metadata(cls, metadata, /):
    """
    Internal: validate the value target and the default against the kind.

    - bits/signed only apply to integers (defaults: 32, True).
    - precision only applies to decimals (default: "double").
    - const only applies to switches (default: True): the value stored when seen.
    - convert only applies to text: a callable turning the raw text into any value.
    - default must be of the kind's Python type (bool excluded from integers) and
      inside the target bounds; when Unset it becomes the kind's zero value (the
      negated const for boolean switches, None for custom switches and converters).
    """
    kind = metadata["kind"]
    name = metadata["name"]

    if kind is not Kind.INT and (metadata["bits"] is not Unset or metadata["signed"] is not Unset):
        raise TypeError(f"{kind.label} {cls.__typename__} {name!r} cannot specify 'bits' or 'signed'")
    if kind is not Kind.DECIMAL and metadata["precision"] is not Unset:
        raise TypeError(f"{kind.label} {cls.__typename__} {name!r} cannot specify 'precision'")
    if kind is not Kind.BOOL and metadata["const"] is not Unset:
        raise TypeError(f"{kind.label} {cls.__typename__} {name!r} cannot specify 'const'")
    if kind is not Kind.TEXT and metadata["convert"] is not Unset:
        raise TypeError(f"{kind.label} {cls.__typename__} {name!r} cannot specify 'convert'")
    if not callable(coalesce(metadata["convert"], callable)):
        raise TypeError(f"{cls.__typename__} {name!r} 'convert' must be callable")

    bounds = None
    if kind is Kind.INT:
        metadata["bits"] = coalesce(metadata["bits"], 32)
        metadata["signed"] = bool(coalesce(metadata["signed"], True))
        bounds = integer_bounds(metadata["bits"], metadata["signed"])
    elif kind is Kind.DECIMAL:
        metadata["precision"] = coalesce(metadata["precision"], "double")
        bounds = decimal_bounds(metadata["precision"])
    elif kind is Kind.BOOL:
        metadata["const"] = coalesce(metadata["const"], True)

    if kind is Kind.BOOL and not isinstance(const := metadata["const"], bool):
        default = coalesce(metadata["default"])
        if default is not None and not isinstance(default, type(const)):
            raise TypeError(f"{kind.label} {cls.__typename__} {name!r} default must be of type {type(const).__name__!r}")
    elif metadata["convert"] is not Unset:
        default = coalesce(metadata["default"])
    else:
        default = coalesce(metadata["default"], not metadata["const"] if kind is Kind.BOOL else kind.python_type())
        if kind is Kind.DECIMAL and isinstance(default, int) and not isinstance(default, bool):
            default = float(default)
        if not isinstance(default, kind.python_type) or (kind is not Kind.BOOL and isinstance(default, bool)):
            raise TypeError(f"{kind.label} {cls.__typename__} {name!r} default must be of type {kind.python_type.__name__!r}")
        if bounds is not None and default not in bounds:
            raise ValueError(f"{kind.label} {cls.__typename__} {name!r} default must be {bounds}")
    metadata["default"] = default
    metadata["bounds"] = bounds


class Option[_T](metaclass=OptionType):
    """
    One declared command-line option of a fixed Kind.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes,
      mirroring the sanitized declaration.
    - value / state / seen expose the per-pass mutable state.

    Invariant
    - value equals default while state is UNSET; an option accepts at most one
      assignment per parse pass (a second one is a DuplicateOptionError).
    """

    __introspectable__ = (
        "kind",
        "name",
        "spellings",
        "descr",
        "required",
        "default",
        "check",
        "bits",
        "signed",
        "precision",
        "bounds",
        "const",
        "convert",
    )

    __displayable__ = (
        "kind",
        "name",
        "spellings",
        "descr",
        "required",
        "default",
        "value",
        "state",
    )

    def __init__(
            self,
            kind,
            name,
            /,
            *spellings,
            descr=Unset,
            default=Unset,
            required=False,
            check=Unset,
            bits=Unset,
            signed=Unset,
            precision=Unset,
            const=Unset,
            convert=Unset,
    ):
        if not isinstance(kind, Kind):
            raise TypeError(f"{type(self).__typename__} 'kind' must be a Kind")

        metadata = {
            "kind": kind,
            "name": name,
            "spellings": spellings,
            "descr": descr,
            "required": required,
            "default": default,
            "check": check,
            "bits": bits,
            "signed": signed,
            "precision": precision,
            "const": const,
            "convert": convert,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_target_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))

        self._value = self._default
        self._state = OptionState.UNSET

    @property
    def value(self):
        return self._value

    @property
    def state(self):
        return self._state

    @property
    def seen(self):
        return self._state is OptionState.SET

    @property
    def marker(self):
        """
        help/usage tag: the kind marker, or "S" for text options with a converter.
        """
        return "S" if self._convert is not None else self._kind.marker

    def _locate(self, token):
        """
        return the first spelling matching 'token', or None.
        """
        for spelling in self._spellings:
            if self._kind is Kind.BOOL:
                if token == spelling:
                    return spelling
            elif token.startswith(spelling):
                return spelling
        return None

    def match(self, token, /):
        """
        tell whether 'token' belongs to this option (no side effects).
        """
        return self._locate(token) is not None

    def assign(self, token, /):
        """
        assign the value carried by 'token'.

        returns
        - None on success (value stored, state becomes SET).
        - DuplicateOptionError when the option was already assigned in this pass.
        - the CoercionError when the value cannot be converted; the option is left
          untouched.

        raises
        - ValueError when 'token' does not match this option at all (caller bug).
        """
        if self._state is OptionState.SET:
            return DuplicateOptionError(
                "option %r repeated multiple times: %s" % (self._name, token),
                name=self._name,
                token=token,
                hint="pass %s only once" % self._name,
            )

        if (spelling := self._locate(token)) is None:
            raise ValueError(f"token {token!r} does not match {self._kind.label} option {self._name!r}")

        try:
            value = coerce(self, token[len(spelling):], token)
        except CoercionError as fault:
            return fault

        self._value = value
        self._state = OptionState.SET
        return None

    def _describe(self, value):
        match self._kind:
            case Kind.BOOL:
                return "switch must not be set" if value == self._const else "switch must be set"
            case Kind.TEXT if isinstance(value, str):
                return 'value "%s" is not allowed' % value
            case _:
                return "value %s is not allowed" % value

    def validate(self):
        """
        check required/validity constraints after a parse pass.

        returns
        - RequiredMissingError when required and never assigned.
        - ValueNotAllowedError when the check rejects the current value.
        - None otherwise.
        """
        if self._required and self._state is OptionState.UNSET:
            return RequiredMissingError(
                "option %r is required" % self._name,
                name=self._name,
                hint="pass it as %s" % self.usage(),
            )
        if not self._check(self._value):
            return ValueNotAllowedError(
                "option %r: %s" % (self._name, self._describe(self._value)),
                name=self._name,
                value=self._value,
                hint=self._descr or "check the accepted values with --help",
            )
        return None

    def reset(self):
        """
        restore the default value and the UNSET state (idempotent).
        """
        self._value = self._default
        self._state = OptionState.UNSET

    def usage(self):
        """
        one-item usage syntax: bare when required, bracketed otherwise.
        """
        syntax = self._spellings[0] + self.marker
        return syntax if self._required else f"[{syntax}]"

    def render(self, indent, /, *, wrap=False, styles=None):
        """
        build the help line as a rich Text (styles optional).

        layout
        - "  " + every spelling followed by the kind marker, space separated
        - padding up to 'indent'; when the spellings already reach it, a single
          space, or a newline plus 'indent' spaces when 'wrap' is set
        - "*" for required options, then the description
        """
        styles = styles or {}
        line = Text("  ")
        line.append(Text(" ").join(
            Text.assemble((spelling, styles.get("spelling", "")), (self.marker, styles.get("marker", "")))
            for spelling in self._spellings
        ))

        if len(line) < indent:
            line.pad_right(indent - len(line))
        elif wrap:
            line.append("\n" + " " * indent)
        else:
            line.append(" ")

        if self._required:
            line.append("*", styles.get("required", ""))
        line.append(self._descr, styles.get("description", ""))
        return line

    def help(self, indent, /, *, wrap=False):
        """
        plain-text help line; see render().
        """
        return self.render(indent, wrap=wrap).plain


class OptionSet(metaclass=OptionType):
    """
    Ordered collection of Options of one Kind.

    Declaration order is kept. Names are unique within a set. match() returns
    the first option accepting a token, so declaration order breaks ties between
    overlapping spellings.
    """

    __introspectable__ = (
        "kind",
        "options",
    )

    def __init__(self, kind, /, *options):
        if not isinstance(kind, Kind):
            raise TypeError(f"{type(self).__typename__} 'kind' must be a Kind")
        self._kind = kind
        self._options = []
        for option in options:
            self.add(option)

    def add(self, option, /):
        if not isinstance(option, Option):
            raise TypeError(f"not an option instance: {option!r}")
        if option.kind is not self._kind:
            raise TypeError(f"cannot add {option.kind.label} option {option.name!r} to a {self._kind.label} {type(self).__typename__}")
        if option.name in self:
            raise ValueError(f"{self._kind.label} option name {option.name!r} is already in use")
        self._options.append(option)
        return option

    def match(self, token, /):
        """
        return the first option matching 'token', or None.
        """
        for option in self._options:
            if option.match(token):
                return option
        return None

    def get(self, name, default=None, /):
        for option in self._options:
            if option.name == name:
                return option
        return default

    def __getitem__(self, name):
        if (option := self.get(name)) is None:
            raise OptionNotFoundError(self._kind, name)
        return option

    def __contains__(self, name):
        return self.get(name) is not None

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def validate(self):
        """
        return the first fault in declaration order, or None.
        """
        for option in self._options:
            if fault := option.validate():
                return fault
        return None

    def reset(self):
        for option in self._options:
            option.reset()


class Section(metaclass=OptionType):
    """
    Help heading. Options declared after a section in Parser(*options) are
    listed under its title; matching and dispatch ignore sections.
    """

    __introspectable__ = (
        "title",
    )

    __displayable__ = (
        "title",
    )

    def __init__(self, title, /):
        if not isinstance(title, str):
            raise TypeError(f"{type(self).__typename__} 'title' must be a string")
        if not title or title.isspace():
            raise ValueError(f"{type(self).__typename__} 'title' must not be empty")
        self._title = title

    def render(self, /, *, styles=None):
        return Text(self._title, (styles or {}).get("group-label", ""))


def switch(name, /, *spellings, descr=Unset, default=Unset, required=False, check=Unset, const=Unset):
    """
    declare a presence-only switch.

    'const' is the value stored when a spelling is seen (default: True). With a
    boolean const the default is its negation, so const=False declares a
    "--no-..." style switch that starts out True. Any other const defaults to
    None, or to a 'default' of the same type.

    example
        verbose = switch("verbose", "-v", "--verbose", descr="print more")
        level = switch("level", "--debug", const="debug", default="info")
    """
    return Option(
        Kind.BOOL, name, *spellings,
        descr=descr, default=default, required=required, check=check, const=const
    )


def integer(name, /, *spellings, descr=Unset, default=Unset, required=False, check=Unset, bits=Unset, signed=Unset):
    """
    declare an integer option; 'bits' (8/16/32/64) and 'signed' fix its range.

    example
        port = integer("port", "--port=", "-p", default=8080, bits=16, signed=False)
    """
    return Option(
        Kind.INT, name, *spellings,
        descr=descr, default=default, required=required, check=check, bits=bits, signed=signed
    )


def decimal(name, /, *spellings, descr=Unset, default=Unset, required=False, check=Unset, precision=Unset):
    """
    declare a decimal option; 'precision' is "single" or "double" (default).
    """
    return Option(
        Kind.DECIMAL, name, *spellings,
        descr=descr, default=default, required=required, check=check, precision=precision
    )


def text(name, /, *spellings, descr=Unset, default=Unset, required=False, check=Unset):
    """
    declare a text option; the value is taken verbatim.
    """
    return Option(Kind.TEXT, name, *spellings, descr=descr, default=default, required=required, check=check)


def manual(name, /, *spellings, convert, descr=Unset, default=Unset, required=False, check=Unset):
    """
    declare a text option whose value goes through 'convert'.

    'convert' receives the value substring and returns the stored value; a
    ValueError or TypeError from it is reported as an InvalidValueError. Help
    and usage tag these options with "S". The default is not converted.

    example
        mode = manual("mode", "--mode=", convert=lambda raw: int(raw, 8), default=0o644)
    """
    return Option(
        Kind.TEXT, name, *spellings,
        descr=descr, default=default, required=required, check=check, convert=convert
    )


def section(title, /):
    """
    declare a help section heading for Parser(*options).
    """
    return Section(title)


__all__ = (
    # Classes
    "Option",
    "OptionSet",
    "OptionState",
    "Section",

    # Factories
    "switch",
    "integer",
    "decimal",
    "text",
    "manual",
    "section",
)

# Not part of the public API.
del OptionType
