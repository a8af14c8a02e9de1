"""
parg registry layer: hold descriptors, parse token streams, hand out typed values.

What this module provides
- CliArguments: a name-ordered registry of Arg descriptors with
  • parse(tokens) / parse_subset(tokens): one-pass lookahead parser + validation.
  • exists(name): presence check for the latest parse.
  • get(name, type): typed retrieval gated by the argument's declared kind.
  • generate_usage(): plain usage text (rendered with rich on --help).
- invoke(cli, tokens): top-level runner turning faults into rendered reports and exit codes.

Parsing model
- Tokens are walked once, left to right, with a single pending-argument register:
  • '--help' (any case) renders usage and raises HelpRequested, whatever the state.
  • while an argument is pending, the token is its value (converted by its kind)
    and is not examined as a switch.
  • otherwise '--<name>' (3+ characters) marks a registered argument as seen;
    value-taking arguments become pending.
  • anything else is ignored, unless strict=True.
- After the walk, arguments are validated in name order: required without a default,
  defaults acceptance, and switches left without a value.
- Every parse starts by resetting all descriptors, so a registry can be parsed
  repeatedly with different streams; it is not safe to parse concurrently.

Quick start
    from parg import Arg, CliArguments, Kind, invoke, u8

    cli = CliArguments(
        Arg.with_value("config", Kind.STRING, True, descr="configuration file"),
        Arg.with_default_value("thread", Kind.U8, 4, descr="worker threads"),
        Arg.without_value("verbose", descr="chatty output"),
        name="tool",
        descr="does the thing",
    )
    invoke(cli)  # exits on --help or on a fault
    threads = cli.get("thread", u8)
"""
import difflib
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .arguments import Arg
from .faults import *
from .kinds import Kind
from .utils import *


def _tokenize(prompt, /):
    """
    normalize a prompt into a list of tokens.

    - str: shell-like string, split with shlex.split.
    - Iterable[str]: used as-is (values are verbatim, empty strings included).
    """
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if not isinstance(prompt, Iterable):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    tokens = list(prompt)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parse() argument must be a string or an iterable of strings")
    return tokens


def _key(name, /):
    if not isinstance(name, str):
        raise TypeError("argument name must be a string")
    return name.lstrip("-")


class CliArguments:
    """
    Argument registry and parser.

    Construction
    - CliArguments(*args, name=..., descr=..., strict=False, colorful=True,
      fancy=False, console=...)
      • args: Arg descriptors; names must be unique.
      • name: program name shown in usage (defaults to basename of sys.argv[0]).
      • descr: one-line description shown on top of usage.
      • strict: raise on unknown switches and stray tokens instead of ignoring them.
      • colorful/fancy: usage and fault styling (fancy wraps output in a panel).
      • console: rich Console used for usage output (stdout by default).

    Iteration yields descriptors in name order.
    """

    name = mirror("name")
    descr = mirror("descr")
    strict = mirror("strict")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    def __new__(
            cls,
            *args,
            name=Unset,
            descr=Unset,
            strict=False,
            colorful=True,
            fancy=False,
            console=Unset
    ):
        arguments = {}
        for argument in args:
            if not isinstance(argument, Arg):
                raise TypeError(f"registry arguments must be Arg descriptors, not {type(argument).__name__!r}")
            if argument.name in arguments:
                raise ValueError(f"registry arguments cannot contain duplicates ({argument.name!r})")
            arguments[argument.name] = argument

        if not isinstance(name, str | Unset):
            raise TypeError("registry 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError("registry 'name' cannot be empty")

        if not isinstance(descr, str | Unset):
            raise TypeError("registry 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("registry 'descr' cannot be empty")

        if not isinstance(console, Console | Unset):
            raise TypeError("registry 'console' must be a rich Console")

        self = super().__new__(cls)
        self._arguments = dict(sorted(arguments.items()))
        self._name = coalesce(name, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "parg")
        self._descr = coalesce(descr)
        self._strict = bool(strict)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._console = coalesce(console, Console())
        # set by invoke() for the duration of its parse
        self._shell = False
        return self

    def __iter__(self):
        return iter(self._arguments.values())

    def __len__(self):
        return len(self._arguments)

    def __contains__(self, name):
        return isinstance(name, str) and _key(name) in self._arguments

    def __getitem__(self, name):
        return self._arguments[_key(name)]

    def __str__(self):
        return "".join("%s\n" % argument for argument in self)

    def __repr__(self):
        return "cli-arguments(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self.name
        yield "descr", self.descr
        yield "arguments", tuple(self)

    def parse(self, tokens=Unset, /):
        """
        parse a token stream into the registered descriptors.

        parameters
        - tokens:
          • Unset: read sys.argv[1:].
          • str: shell-like string; split with shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        raises (first failure wins)
        - HelpRequested: '--help' was given; usage has been rendered.
        - ConversionError: a value does not parse as its argument's kind.
        - UnknownSwitchError / UnexpectedTokenError: strict mode only.
        - MissingRequiredError / MissingValueError / DefaultTypeMismatchError: validation.
        """
        if tokens is Unset:
            tokens = sys.argv[1:]
        self._parseargs(_tokenize(tokens))

    def parse_subset(self, tokens, /):
        """
        parse an explicit slice of tokens (e.g. what follows a leading program name).
        same algorithm and faults as parse(); there is no sys.argv fallback.
        """
        self._parseargs(_tokenize(tokens))

    def exists(self, name, /):
        """
        true when the argument is registered and was seen in the latest parse.
        unknown names are simply absent (no fault).
        """
        argument = self._arguments.get(_key(name))
        return argument is not None and argument.seen

    def get(self, name, type, /):
        """
        typed retrieval of an argument's value.

        parameters
        - name: registered argument name (leading dashes are ignored).
        - type: native type (u8, f64, bool, char, str, …) or Kind member; must be
          the argument's declared kind.

        resolution
        - the value of the latest parse, else the declared default, else a fault.

        raises
        - UnknownArgumentError, NotValueTakingError, TypeMismatchError,
          NoValueNoDefaultError, DefaultTypeMismatchError (default does not fit its kind).
        """
        try:
            argument = self._arguments[key := _key(name)]
        except KeyError:
            suggestions = difflib.get_close_matches(key, self._arguments.keys(), 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "register it with an Arg before asking for it"
            raise UnknownArgumentError(
                "argument %r does not exist" % key,
                title="unknown argument",
                code=FaultCode.UNKNOWN_ARGUMENT,
                tool=self,
                input=key,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
            ) from None

        if not argument.takes_value:
            raise NotValueTakingError(
                "argument '--%s' does not take a value" % key,
                title="argument takes no value",
                code=FaultCode.NOT_VALUE_TAKING,
                tool=self,
                argument=argument,
                hint="use exists(%r) to know whether it was given" % key,
                docs=getdoc(FaultCode.NOT_VALUE_TAKING),
            )

        if (requested := Kind.of(type, None)) is not argument.kind:
            label = requested.label if requested else getattr(type, "__name__", repr(type))
            raise TypeMismatchError(
                "requested type %s for '--%s' does not match its kind %s" % (label, key, argument.kind),
                title="type mismatch",
                code=FaultCode.TYPE_MISMATCH,
                tool=self,
                argument=argument,
                kind=argument.kind,
                requested=type,
                hint="ask for %s instead" % argument.kind.type.__name__,
                docs=getdoc(FaultCode.TYPE_MISMATCH),
            )

        if argument.value is not None:
            return argument.value

        if argument.has_default():
            try:
                return argument.kind.coerce(argument.default)
            except TypeError as exception:
                raise DefaultTypeMismatchError(
                    "default %r of argument '--%s' does not match its kind %s" % (argument.default, key, argument.kind),
                    title="default type mismatch",
                    code=FaultCode.DEFAULT_TYPE_MISMATCH,
                    tool=self,
                    argument=argument,
                    kind=argument.kind,
                    hint="give '--%s' a default that fits %s" % (key, argument.kind),
                    docs=getdoc(FaultCode.DEFAULT_TYPE_MISMATCH),
                ) from exception

        raise NoValueNoDefaultError(
            "argument '--%s' has no value nor default value" % key,
            title="no value",
            code=FaultCode.NO_VALUE_NO_DEFAULT,
            tool=self,
            argument=argument,
            hint="check exists(%r) first or give it a default" % key,
            docs=getdoc(FaultCode.NO_VALUE_NO_DEFAULT),
        )

    def generate_usage(self):
        """
        plain usage text: description, signature line, and one line per argument.

        value-taking arguments read '--name <value>'; presence flags read '--name'
        alone, both in the signature line and in the argument lines.
        """
        return self._usage().plain

    def _usage(self):
        """
        Build the usage text as a rich Text.

        Palette keys
        - usage-label, program-name, description-section, group-label
        - option-name, flag-name, metavar, argument-description, default

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed (the plain text is identical).
        """
        styles = defaultdict(str, {
            # === Head sections ===
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "description-section": "italic #A3A3A3",  # Neutral gray

            # === Arguments ===
            "group-label": "bold #FFFFFF",  # Pure white headers
            "option-name": "bold #00E6FF",  # CYAN for value-taking arguments
            "flag-name": "bold #22C55E",  # GREEN for flags
            "metavar": "bold #FFD600",  # AMBER for <value>
            "argument-description": "#9CA3AF",  # Muted gray
            "default": "#D1D5DB",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.colorful:
                return Text(str(fragment))
            return Text(str(fragment), style)

        def signature(argument):
            if not argument.takes_value:
                return text("--" + argument.name, styler("flag-name"))
            return Text.assemble(text("--" + argument.name, styler("option-name")), " ", text("<value>", styler("metavar")))

        usage = Text()
        if self.descr:
            usage.append(text(self.descr, styler("description-section"))).append("\n")

        usage.append(text("Usage", styler("usage-label"))).append(":\n")
        usage.append(text(self.name, styler("program-name")))
        for argument in self:
            usage.append(" ").append(signature(argument))
        usage.append("\n\n")

        usage.append(text("Arguments", styler("group-label"))).append(":\n")
        for argument in self:
            usage.append(signature(argument)).append("    ")
            usage.append(text(argument.descr, styler("argument-description")))
            usage.append(" (default: ").append(text(argument.format_default(), styler("default"))).append(")\n")
        usage.append(text("--help", styler("flag-name"))).append("    ")
        usage.append(text("print this help message", styler("argument-description")))
        return usage

    def _helper(self):
        """
        Render usage to the console (inside a panel when fancy=True).
        """
        renderable = self._usage()
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self.name} HELP".upper(), " ", "]", style="bold #FF4D94" if self.colorful else ""),
                title_align="left",
            )
        self._console.print(renderable)

    def _parseargs(self, tokens):
        """
        walk the tokens once, then validate.

        state
        - pending: the value-taking argument waiting for its value (None while
          expecting a switch or a value-less token).

        invariants
        - a token consumed as a value is never examined as a switch.
        - '--help' is examined first, so it wins even in value position.
        - faults are raised immediately (fail-fast); the next parse starts from scratch.
        """
        for argument in self:
            argument._reset()

        pending = None
        for index, token in enumerate(tokens, 1):
            switch = token.startswith("--") and len(token) >= 3

            if switch and token[2:].lower() == "help":
                self._helper()
                raise HelpRequested(
                    title="help requested",
                    code=FaultCode.HELP_REQUESTED,
                    tool=self,
                    index=index,
                )

            if pending is not None:
                self._read_value(pending, token, index)
                pending = None
            elif switch:
                pending = self._read_switch(token[2:], index)
            elif self.strict:
                raise UnexpectedTokenError(
                    "unexpected token %r at position %d" % (token, index),
                    title="unexpected token",
                    code=FaultCode.UNEXPECTED_TOKEN,
                    tool=self,
                    token=token,
                    index=index,
                    hint="values must follow their '--name'; run '%s --help' to see valid forms" % self.name,
                    docs=getdoc(FaultCode.UNEXPECTED_TOKEN),
                )

        self._check_args()

    def _read_switch(self, name, index):
        """
        mark a switch as seen; return the argument when it now waits for a value.
        """
        try:
            argument = self._arguments[name]
        except KeyError:
            if not self.strict:
                return None
            suggestions = difflib.get_close_matches(name, self._arguments.keys(), 5)
            try:
                hint = "did you mean '--%s'? you can also run '%s --help' to see all arguments" % (suggestions[0], self.name)
            except IndexError:
                hint = "try '%s --help' to see all available arguments" % self.name
            raise UnknownSwitchError(
                "unknown argument '--%s' at position %d" % (name, index),
                title="unknown argument",
                code=FaultCode.UNKNOWN_SWITCH,
                tool=self,
                input=name,
                index=index,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_SWITCH),
            ) from None

        if argument.seen:
            trigger(RepeatedArgumentWarning(
                "argument '--%s' repeated at position %d; the last occurrence wins" % (name, index),
                title="repeated argument",
                code=FaultCode.REPEATED_ARGUMENT,
                argument=argument,
                index=index,
                hint="give '--%s' only once" % name,
                docs=getdoc(FaultCode.REPEATED_ARGUMENT),
            ), tool=self, shell=self._shell, colorful=self.colorful, fancy=self.fancy)

        argument._mark()
        return argument if argument.takes_value else None

    def _read_value(self, argument, token, index):
        """
        convert a value token with the argument's kind and store it.
        """
        try:
            argument._store(argument.kind.parse(token))
        except ValueError as exception:
            raise ConversionError(
                "argument value %r for '%s' must be %s: %s" % (token, argument.name, argument.kind, exception),
                title="invalid value",
                code=FaultCode.CONVERSION_FAILED,
                tool=self,
                token=token,
                index=index,
                argument=argument,
                kind=argument.kind,
                reason=str(exception),
                hint="pass a %s literal after '--%s'" % (argument.kind, argument.name),
                docs=getdoc(FaultCode.CONVERSION_FAILED),
            ) from exception

    def _check_args(self):
        """
        post-parse validation, in name order; the first failure is raised.
        """
        for name, argument in self._arguments.items():
            if not argument.seen:
                if argument.has_default():
                    self._accept_default(argument)
                elif argument.required:
                    raise MissingRequiredError(
                        "argument '--%s' is required" % name,
                        title="missing required argument",
                        code=FaultCode.MISSING_REQUIRED,
                        tool=self,
                        argument=argument,
                        hint="add '--%s%s' to the command line" % (name, " <value>" if argument.takes_value else ""),
                        docs=getdoc(FaultCode.MISSING_REQUIRED),
                    )
            elif argument.takes_value and argument.value is None:
                if argument.has_default():
                    self._accept_default(argument)
                else:
                    raise MissingValueError(
                        "argument '--%s' needs a value" % name,
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        tool=self,
                        argument=argument,
                        hint="give a %s after '--%s'" % (argument.kind, name),
                        docs=getdoc(FaultCode.MISSING_VALUE),
                    )

    def _accept_default(self, argument):
        try:
            argument.accept_default()
        except ValidationError as fault:
            trigger(fault, tool=self)


def invoke(cli, tokens=Unset, /):
    """
    Convenience runner: parse, and turn faults into process outcomes.

    Behavior
    - success: returns the registry, ready for get()/exists().
    - warnings: rendered with rich on stderr instead of going through warnings.warn.
    - HelpRequested: usage was printed; exits with status 0.
    - any other fault: renders it with rich on stderr and exits with status 1.
    """
    if not isinstance(cli, CliArguments):
        raise TypeError("invoke() first argument must be a CliArguments registry")
    cli._shell = True
    try:
        cli.parse(tokens)
    except ArgumentException as fault:
        trigger(fault, tool=cli, shell=True, fancy=cli.fancy, colorful=cli.colorful)
    finally:
        cli._shell = False
    return cli


__all__ = (
    # Public API surface for consumers of parg.registry.
    # These names are re-exported from the package __init__.
    "CliArguments",
    "invoke",
)
