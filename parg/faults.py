"""
parg faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- ArgumentException / ArgumentWarning: base types that carry a message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- ParseError: raised while walking the token stream (conversion, strict-mode
  unknown switches/tokens) and the HelpRequested sentinel.
- ValidationError: raised by the post-parse pass (required, needs-a-value, defaults).
- RetrievalError: raised by CliArguments.get (unknown name, no payload, type gate).

Contract
- str(fault) is the message; HelpRequested carries an empty message so callers
  can tell "handled, stop now" apart from a real failure.
- Nothing here terminates the process unless shell mode is requested by the caller.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
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
    canonical fault codes used across parg (stable identifiers).

    grouping (by high-level domain)
    - parsing (211xx)
      • HELP_REQUESTED, CONVERSION_FAILED, UNKNOWN_SWITCH, UNEXPECTED_TOKEN
    - validation (212xx)
      • MISSING_REQUIRED, MISSING_VALUE, DEFAULT_TYPE_MISMATCH, MISSING_VALUE_KIND
    - retrieval (213xx)
      • UNKNOWN_ARGUMENT, NOT_VALUE_TAKING, TYPE_MISMATCH, NO_VALUE_NO_DEFAULT
    - warnings (22xxx)
      • REPEATED_ARGUMENT

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- parsing errors (211xx) ---
    HELP_REQUESTED              = 21100
    CONVERSION_FAILED           = 21101
    UNKNOWN_SWITCH              = 21102
    UNEXPECTED_TOKEN            = 21103

    # --- validation errors (212xx) ---
    MISSING_REQUIRED            = 21201
    MISSING_VALUE               = 21202
    DEFAULT_TYPE_MISMATCH       = 21203
    MISSING_VALUE_KIND          = 21204

    # --- retrieval errors (213xx) ---
    UNKNOWN_ARGUMENT            = 21301
    NOT_VALUE_TAKING            = 21302
    TYPE_MISMATCH               = 21303
    NO_VALUE_NO_DEFAULT         = 21304

    # --- warnings (22xxx) ---
    REPEATED_ARGUMENT           = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    main = __import__("__main__")
    try:
        return getattr(main, "__prog__", options["tool"].name)
    except KeyError:
        return getattr(main, "__prog__", "parg")


class ArgumentException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.options["code"].normalize() if "code" in self.options else "", styler("code")),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseError(ArgumentException): ...
class ValidationError(ArgumentException): ...
class RetrievalError(ArgumentException): ...


class HelpRequested(ParseError):
    """
    sentinel raised after the usage text was rendered; carries no message.
    """

    def __init__(self, message="", /, **options):
        super().__init__(message, **options)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        sys.exit(0)


class ConversionError(ParseError): ...
class UnknownSwitchError(ParseError): ...
class UnexpectedTokenError(ParseError): ...

class MissingRequiredError(ValidationError): ...
class MissingValueError(ValidationError): ...
class DefaultTypeMismatchError(ValidationError): ...
class MissingValueKindError(ValidationError): ...

class UnknownArgumentError(RetrievalError): ...
class NotValueTakingError(RetrievalError): ...
class TypeMismatchError(RetrievalError): ...
class NoValueNoDefaultError(RetrievalError): ...


class ArgumentWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.options["code"].normalize() if "code" in self.options else "", styler("code")),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), styler("warning-title")),
            " ]"
        )
        message = text(self.message, styler("warning-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RepeatedArgumentWarning(ArgumentWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console (and errors exit the
      process); otherwise exceptions are raised and warnings go through warnings.warn.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, and any other context the
      reporter may want to show (e.g., token/argument/kind).
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

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgumentException",
    "ParseError",
    "ValidationError",
    "RetrievalError",
    "HelpRequested",
    "ConversionError",
    "UnknownSwitchError",
    "UnexpectedTokenError",
    "MissingRequiredError",
    "MissingValueError",
    "DefaultTypeMismatchError",
    "MissingValueKindError",
    "UnknownArgumentError",
    "NotValueTakingError",
    "TypeMismatchError",
    "NoValueNoDefaultError",
    "ArgumentWarning",
    "RepeatedArgumentWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
