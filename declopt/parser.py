"""
declopt parser: dispatch tokens to declared options, validate, render help.

What this module provides
- Parser: owns one OptionSet per Kind and runs the parse → validate → read cycle.

Dispatch
- Tokens are processed strictly in order. Each token is offered to the option
  sets in Kind order (switches, integers, decimals, text) and, within a set, to
  the options in declaration order. The first option that matches receives the
  token. Overlapping spellings are therefore resolved by declaration order (Kind
  order first); the parser warns about them when it is built.
- A token nobody matches is an UnknownArgumentError in strict mode, or is
  collected and returned as a positional when the parser was built with
  positionals=True.
- The first fault aborts the pass. validate() raises the first failure found in
  Kind then declaration order; failures are never aggregated.

Executable label
- When the first token is the executable path, it is captured as a label (used
  by usage/help) and never matched against options.

Rendering
- usage() and help() are pure: they read declarations only. __rich__() returns
  the same help as styled rich Text for print_help().
- Options declared after a Section are listed under its title, in declaration
  order, after the default "Switchable options" and "Value options" groups.

Quick start
    from declopt import Parser, integer, switch, text

    parser = Parser(
        integer("count", "--count=", descr="how many times", default=1),
        switch("verbose", "-v", descr="print more"),
        text("name", "--name=", descr="who to greet", required=True),
        prog="greeter",
    )
    parser.parse(["--count=3", "--name=abc"])
    parser.validate()
    parser["count"], parser["verbose"], parser["name"]  # 3, False, "abc"
"""
import itertools
import sys
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .faults import *
from .kinds import Kind
from .options import Option, OptionSet, Section
from .utils import *


def _overlaps(first, second):
    """
    tell whether one token could be matched by both options.
    """
    for one, other in itertools.product(first.spellings, second.spellings):
        match first.kind.takes_value, second.kind.takes_value:
            case False, False:
                if one == other:
                    return True
            case True, True:
                if one.startswith(other) or other.startswith(one):
                    return True
            case True, False:
                if other.startswith(one):
                    return True
            case False, True:
                if one.startswith(other):
                    return True
    return False


class Parser:
    """
    Declarative command-line option parser.

    Parameters
    - *options: Option, OptionSet or Section instances, in declaration order.
    - prog: program label used in the help header (and in usage when no
      executable label was captured).
    - positionals: when True, unmatched tokens are returned by parse() instead
      of raising UnknownArgumentError.
    - indent: column at which help descriptions start.
    - wrap: put descriptions on their own line when the spellings are too long.
    - shell: render faults on stderr and exit instead of raising.
    - fancy: render faults inside a rich Panel (shell mode).
    - colorful: style rich output.

    Not thread-safe: one parse pass must finish before the next one starts; use
    independent instances for concurrent option sets.
    """

    def __init__(
            self,
            *options,
            prog="",
            positionals=False,
            indent=16,
            wrap=False,
            shell=False,
            fancy=False,
            colorful=True,
    ):
        if not isinstance(prog, str):
            raise TypeError("parser 'prog' must be a string")
        if not isinstance(indent, int) or isinstance(indent, bool) or indent < 0:
            raise TypeError("parser 'indent' must be a non-negative integer")

        self._sets = {kind: OptionSet(kind) for kind in Kind}
        self._sections = []
        for object in options:
            if isinstance(object, Section):
                self._sections.append((object, []))
                continue
            if isinstance(object, OptionSet):
                members = list(object)
            elif isinstance(object, Option):
                members = [object]
            else:
                raise TypeError(f"not an option, option-set or section instance: {object!r}")
            for option in members:
                self._sets[option.kind].add(option)
                if self._sections:
                    self._sections[-1][1].append(option)

        self._prog = prog
        self._positionals = bool(positionals)
        self._indent = indent
        self._wrap = bool(wrap)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._executable = None

        for first, second in itertools.combinations(self.options, 2):
            if _overlaps(first, second):
                self.trigger(OverlappingSpellingWarning(
                    "%s option %r and %s option %r share spellings; %r wins on ties" % (
                        first.kind.label, first.name, second.kind.label, second.name, first.name
                    ),
                    name=second.name,
                    hint="declaration order breaks ties; give %r distinct spellings" % second.name,
                ))

    prog = property(lambda self: self._prog)
    positionals = property(lambda self: self._positionals)
    indent = property(lambda self: self._indent)
    executable = property(lambda self: self._executable)

    @property
    def sets(self):
        """
        the option sets, in Kind (dispatch) order.
        """
        return tuple(self._sets.values())

    @property
    def sections(self):
        """
        the declared help sections, in declaration order.
        """
        return tuple(section for section, _ in self._sections)

    @property
    def options(self):
        """
        every declared option, in dispatch order.
        """
        return tuple(itertools.chain.from_iterable(self._sets.values()))

    def trigger(self, fault, /, **options):
        """
        surface a fault with this parser's presentation flags.
        """
        trigger(fault, **options, prog=self._prog or "declopt", shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def _dispatch(self, token):
        for option_set in self._sets.values():
            if (option := option_set.match(token)) is not None:
                return option
        return None

    def parse(self, tokens=Unset, /, executable=Unset):
        """
        assign every token to its option.

        parameters
        - tokens: iterable of strings; sys.argv when omitted.
        - executable: whether the first token is the executable path. defaults
          to True when reading sys.argv, False otherwise.

        returns
        - list[str]: unmatched tokens, in order (always empty in strict mode).

        raises
        - TooFewItemsError: executable expected but the stream is empty.
        - UnknownArgumentError: unmatched token in strict mode.
        - DuplicateOptionError / MissingValueError / NotANumberError /
          OutOfRangeError / InvalidValueError: from the first failing assignment.
        """
        if tokens is Unset:
            tokens = sys.argv
            executable = coalesce(executable, True)
        tokens = iter(tokens)

        if coalesce(executable, False):
            try:
                self._executable = next(tokens)
            except StopIteration:
                self.trigger(TooFewItemsError(
                    "too few items: expected the executable path as first token",
                    hint="pass executable=False when the stream holds options only",
                ))
                return []
        else:
            self._executable = None

        positionals = []
        for token in tokens:
            if (option := self._dispatch(token)) is None:
                if self._positionals:
                    positionals.append(token)
                    continue
                self.trigger(UnknownArgumentError(
                    "unknown argument: %s" % token,
                    token=token,
                    hint="accepted spellings: %s" % ", ".join(
                        spelling for option in self.options for spelling in option.spellings
                    ),
                ))
                return positionals

            if fault := option.assign(token):
                self.trigger(fault)
                return positionals

        return positionals

    def validate(self):
        """
        raise the first required/validity failure, in Kind then declaration order.
        """
        for option_set in self._sets.values():
            if fault := option_set.validate():
                self.trigger(fault)
                return

    def reset(self):
        """
        forget the executable label and restore every option to its default.
        """
        self._executable = None
        for option_set in self._sets.values():
            option_set.reset()

    def option(self, kind, name, /):
        """
        return the declared Option; OptionNotFoundError when absent.
        """
        return self._sets[kind][name]

    def get(self, kind, name, /):
        """
        return the current value of the option 'name' of the given kind.
        """
        return self.option(kind, name).value

    def __getitem__(self, name):
        for option_set in self._sets.values():
            if (option := option_set.get(name)) is not None:
                return option.value
        raise OptionNotFoundError(None, name)

    def __contains__(self, name):
        return any(name in option_set for option_set in self._sets.values())

    def values(self):
        """
        mapping of option name → current value, in dispatch order.
        """
        return {option.name: option.value for option in self.options}

    def usage(self):
        """
        one line: the label followed by every option's syntax (optional ones bracketed).
        """
        usage = ["Usage:"]
        if label := self._executable or self._prog:
            usage.append(label)
        usage.extend(option.usage() for option in self.options)
        return " ".join(usage)

    def _render(self, styles):
        """
        build the help screen as rich Text.
        """
        def styler(style):
            return styles[style] if self._colorful else ""

        palette = {
            "spelling": styler("spelling"),
            "marker": styler("marker"),
            "required": styler("required"),
            "description": styler("description"),
        }

        screen = Text()
        if self._prog:
            screen.append(self._prog, styler("program-name")).append(": ")
        screen.append("Help screen", styler("title")).append("\n\n")

        screen.append("Usage:", styler("usage-label")).append(" ")
        if label := self._executable or self._prog:
            screen.append(label, styler("program-name")).append(" ")
        screen.append("[OPTIONS...]", styler("usage-section")).append("\n")

        sectioned = {id(option) for _, members in self._sections for option in members}
        switches = [option for option in self._sets[Kind.BOOL] if id(option) not in sectioned]
        values = [
            option
            for option in itertools.chain.from_iterable(self._sets[kind] for kind in Kind if kind.takes_value)
            if id(option) not in sectioned
        ]

        if switches:
            screen.append("\n").append("Switchable options:", styler("group-label")).append("\n")
            for option in switches:
                screen.append(option.render(self._indent, wrap=self._wrap, styles=palette)).append("\n")

        if values:
            legend = ", ".join(f"{kind.marker}={kind.label}" for kind in Kind if kind.takes_value)
            if any(option.convert is not None for option in self._sets[Kind.TEXT]):
                legend += ", S=custom"
            screen.append("\n").append(f"Value options ({legend}):", styler("group-label")).append("\n")
            for option in values:
                screen.append(option.render(self._indent, wrap=self._wrap, styles=palette)).append("\n")

        for section, members in self._sections:
            screen.append("\n").append(section.render(styles={"group-label": styler("group-label")})).append("\n")
            for option in members:
                screen.append(option.render(self._indent, wrap=self._wrap, styles=palette)).append("\n")

        return screen

    def help(self):
        """
        plain-text help screen.
        """
        return self._render(defaultdict(str)).plain

    def __rich__(self):
        styles = defaultdict(str, {
            "program-name": "bold #FF4D94",  # magenta-pink brand
            "title": "bold #FFFFFF",
            "usage-label": "bold #00E6FF",  # cyan signature info
            "usage-section": "bold #36C5F0",
            "group-label": "bold #FFFFFF",
            "spelling": "bold #00E6FF",
            "marker": "bold #FFD600",  # amber kind markers
            "required": "bold #EF4444",
            "description": "#9CA3AF",  # muted gray
        } | getattr(__import__("__main__"), "__styles__", {}))
        return self._render(styles)

    def print_help(self, file=None):
        """
        print the help screen on a rich Console (stdout by default).
        """
        Console(file=file, highlight=False).print(self, end="")


__all__ = (
    "Parser",
)
