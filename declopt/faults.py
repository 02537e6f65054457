"""
declopt faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
- ParserFault: base exception carrying a message plus a read-only mapping of
  context (option name, original token, offending value, bounds...). Faults know
  how to render themselves with rich and how to surface themselves (trigger()).
- ParseError / ValidationError: the two fault families. Parse errors abort a
  parse pass at the offending token; validation errors are raised by validate().
- OptionNotFoundError: programmer error (lookup of an undeclared name), a
  LookupError outside the fault hierarchy.
- ParserWarning: non-fatal declaration issues (overlapping spellings).
- trigger(): central entry point to surface a fault (raise or render in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Options return faults as values from assign()/validate(); the Parser decides
  what to do with them and surfaces them through trigger().
- In non-shell mode exceptions are raised and warnings go through warnings.warn;
  in shell mode both are rendered on stderr via rich.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - coercion (1121x): MISSING_VALUE, NOT_A_NUMBER, OUT_OF_RANGE, INVALID_VALUE
    - structure (1122x): TOO_FEW_ITEMS, UNKNOWN_ARGUMENT, DUPLICATE_OPTION
    - validation (1123x): REQUIRED_MISSING, VALUE_NOT_ALLOWED
    - warnings (122xx): OVERLAPPING_SPELLING
    """
    # --- coercion errors ---
    MISSING_VALUE           = 11211
    NOT_A_NUMBER            = 11212
    OUT_OF_RANGE            = 11213
    INVALID_VALUE           = 11214

    # --- structural errors ---
    TOO_FEW_ITEMS           = 11221
    UNKNOWN_ARGUMENT        = 11222
    DUPLICATE_OPTION        = 11223

    # --- validation errors ---
    REQUIRED_MISSING        = 11231
    VALUE_NOT_ALLOWED       = 11232

    # --- warnings ---
    OVERLAPPING_SPELLING    = 12211

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderable(fault, styles, *, kind):
    """
    build the rich renderable shared by errors and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body: the message, then "→ hint" when a hint is present
    - fancy: header becomes the title of a Panel around the body
    """
    colorful = fault.options.get("colorful", True)

    def styler(style):
        return styles[style] if colorful else ""

    def fragment(object, style=""):
        if not object:
            return Text("")
        if isinstance(object, Text):
            return object if colorful else Text(object.plain)
        return Text(str(object), style)

    header = Text.assemble(
        "[ ",
        fragment(fault.options.get("prog", "declopt"), styler("prog-name")),
        " — ",
        fragment(code.normalize() if (code := fault.options.get("code")) else "", styler("code")),
        " | ",
        fragment(fault.options.get("title", kind).title(), styler(f"{kind}-title")),
        " ]",
    )
    body = [fragment(fault.message, styler(f"{kind}-message"))]
    if hint := fault.options.get("hint"):
        body.append(Text.assemble(fragment(" → ", styler("hint-arrow")), fragment(hint, styler("hint"))))

    if fault.options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class ParserFault(Exception):
    """
    base of every user-facing parser error.

    attributes
    - message: the one-line, user-facing message.
    - options: read-only mapping with the context of the fault. common keys:
      name (option name), token (original token), value (raw or typed value),
      bounds (numeric range), code (FaultCode), title, hint, and presentation
      flags (prog, shell, fancy, colorful).
    """
    code = None
    title = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": self.code, "title": self.title} | options)

    @property
    def name(self):
        return self.options.get("name")

    @property
    def token(self):
        return self.options.get("token")

    def __str__(self):
        return str(self.message)

    def __eq__(self, other):
        if not isinstance(other, ParserFault):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message and self.options == other.options

    __hash__ = Exception.__hash__

    def __rich__(self):
        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # pinky title
            "error-message": "#C8C8D0",  # soft gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(__import__("__main__"), "__styles__", {}))
        return _renderable(self, styles, kind="error")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(2)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseError(ParserFault):
    """
    raised while parsing; the pass stops at the offending token.
    """


class CoercionError(ParseError):
    """
    a value substring could not be turned into a typed value.
    """


class MissingValueError(CoercionError):
    code = FaultCode.MISSING_VALUE
    title = "missing value"


class NotANumberError(CoercionError):
    code = FaultCode.NOT_A_NUMBER
    title = "not a number"


class OutOfRangeError(CoercionError):
    code = FaultCode.OUT_OF_RANGE
    title = "out of range"

    @property
    def bounds(self):
        return self.options.get("bounds")


class InvalidValueError(CoercionError):
    """
    a custom converter rejected the value substring.
    """
    code = FaultCode.INVALID_VALUE
    title = "invalid value"


class TooFewItemsError(ParseError):
    code = FaultCode.TOO_FEW_ITEMS
    title = "too few items"


class UnknownArgumentError(ParseError):
    code = FaultCode.UNKNOWN_ARGUMENT
    title = "unknown argument"


class DuplicateOptionError(ParseError):
    code = FaultCode.DUPLICATE_OPTION
    title = "duplicate option"


class ValidationError(ParserFault):
    """
    raised by validate() after a complete, error-free parse.
    """


class RequiredMissingError(ValidationError):
    code = FaultCode.REQUIRED_MISSING
    title = "required option missing"


class ValueNotAllowedError(ValidationError):
    code = FaultCode.VALUE_NOT_ALLOWED
    title = "value not allowed"


class OptionNotFoundError(LookupError):
    """
    a value was requested for a name that was never declared.

    this is a programmer error (a typo in the lookup), not a user-input fault,
    so it is neither rendered nor routed through trigger().
    """

    def __init__(self, kind, name):
        super().__init__(f"no {f"{kind.label} " if kind else ""}option named {name!r} was declared")
        self.kind = kind
        self.name = name

    def __str__(self):
        return self.args[0]


class ParserWarning(Warning):
    """
    base of non-fatal parser diagnostics.
    """
    code = None
    title = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": self.code, "title": self.title} | options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        } | getattr(__import__("__main__"), "__styles__", {}))
        return _renderable(self, styles, kind="warning")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class OverlappingSpellingWarning(ParserWarning):
    code = FaultCode.OVERLAPPING_SPELLING
    title = "overlapping spelling"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - errors raise outside shell mode; in shell mode they are printed on stderr
      and the process exits with status 2. warnings are emitted or printed.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ whose keys
    are FaultCode members. returns None when nothing is documented.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserFault",
    "ParseError",
    "CoercionError",
    "MissingValueError",
    "NotANumberError",
    "OutOfRangeError",
    "InvalidValueError",
    "TooFewItemsError",
    "UnknownArgumentError",
    "DuplicateOptionError",
    "ValidationError",
    "RequiredMissingError",
    "ValueNotAllowedError",
    "OptionNotFoundError",
    "ParserWarning",
    "OverlappingSpellingWarning",
    "trigger",
    "getdoc",
)
