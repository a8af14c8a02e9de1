r"""
parg argument descriptors.

Overview
- Arg: an immutable declaration (name, kind, required, default, descr) paired
  with run-scoped state (seen, value) that only the registry's parse writes.

- Named constructors
  • Arg.with_value(name, kind, required=False): value-taking, no default.
  • Arg.with_default_value(name, kind, default, required=False): value-taking, with default.
  • Arg.without_value(name, required=False): presence-only flag (kind is None).

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- name: str, leading '-' markers stripped; non-empty, no whitespace, no '='.
  'help' (in any case) is reserved for the built-in usage switch.
- kind: None | Kind | native type (u8, f64, bool, str, …); normalized to a Kind.
- default: Unset | value. Checked against kind lazily, when accepted (see accept_default).
  Explicit None is rejected; omit the default instead.
- required: bool.
- descr: Unset | str (short help), non-empty when provided.

Run-scoped state
- seen: whether the switch appeared in the latest parsed stream.
- value: the native typed value (value-taking) or True (presence-only, once seen);
  None while unset.

Quick example:
    >>> from parg import Arg, Kind
    >>> threshold = Arg.with_value("threshold", Kind.U8, True, descr="cut-off level")
    >>> threads = Arg.with_default_value("thread", Kind.U8, 42)
    >>> verbose = Arg.without_value("verbose")
"""
import functools
import operator
import re

from .faults import *
from .kinds import Kind
from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns descriptor classes into introspectable specs.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - arg(name='verbose', kind=None, required=False, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate descriptor metadata in place.

    Raises
    - TypeError: wrong types (name, kind, descr), explicit None default, or a
      default given to a presence-only argument.
    - ValueError: empty/ill-formed/reserved name, empty descr.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip().lstrip("-")):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"[\s=]", name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace or '='")
    elif name.lower() == "help":
        raise ValueError(f"{cls.__typename__} 'name' cannot be {name!r} (reserved for usage)")
    metadata["name"] = name

    if (kind := metadata["kind"]) is not None:
        try:
            kind = Kind.of(kind)
        except TypeError:
            raise TypeError(f"{cls.__typename__} 'kind' must be a value kind, not {kind!r}") from None
    metadata["kind"] = kind

    if metadata["default"] is None:
        raise TypeError(f"{cls.__typename__} 'default' cannot be None (omit it instead)")
    elif metadata["default"] is not Unset and kind is None:
        raise TypeError(f"presence-only {cls.__typename__} cannot have a 'default'")

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Arg(metaclass=ArgumentType):
    """
    Named argument descriptor.

    A value-taking Arg (kind is a Kind) reads the token following its switch and
    converts it to the kind's native type; a presence-only Arg (kind is None)
    records True when its switch is seen.

    Properties
    - name, kind, required, descr, seen: read-only mirrors of the backing fields.
    - default: the declared default, or None when there is none.
    - value: the current run's value, or None when unset.
    """

    __introspectable__ = (
        "name",
        "kind",
        "required",
        "descr",
        "seen",
    )
    __displayable__ = (
        "name",
        "kind",
        "required",
        "default",
        "descr",
        "seen",
        "value",
    )

    def __new__(cls, name, /, kind=None, default=Unset, *, required=False, descr=Unset):
        """
        Construct an Arg with the provided metadata.

        Parameters
        - name: str
          Identifier used as '--name' on the command line (leading dashes are stripped).
        - kind: None | Kind | native type
          Value kind; None declares a presence-only flag.
        - default: Unset | value
          Default accepted when the switch is absent or lacks its value.
        - required: bool
          Parsing fails when a required argument is absent and has no default.
        - descr: Unset | str
          Short description for usage. If Unset, becomes None.
        """
        metadata = {
            "name": name,
            "kind": kind,
            "default": default,
            "required": bool(required),
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for field, object in metadata.items():
            setattr(self, "_" + field, object)

        self._seen = False
        self._value = Unset
        return self

    @classmethod
    def with_value(cls, name, kind, required=False, *, descr=Unset):
        """
        value-taking argument without a default.
        """
        return cls(name, kind, required=required, descr=descr)

    @classmethod
    def with_default_value(cls, name, kind, default, required=False, *, descr=Unset):
        """
        value-taking argument with a default; the default must fit the kind
        (e.g. 42 for u8), which is checked when the default is accepted.
        """
        return cls(name, kind, default, required=required, descr=descr)

    @classmethod
    def without_value(cls, name, required=False, *, descr=Unset):
        """
        presence-only flag.
        """
        return cls(name, required=required, descr=descr)

    @property
    def default(self):
        return coalesce(self._default)

    @property
    def value(self):
        return coalesce(self._value)

    @property
    def takes_value(self):
        return self._kind is not None

    def has_default(self):
        return self._default is not Unset

    def accept_default(self):
        """
        copy the default into the current value, re-checking it against the kind.

        raises
        - MissingValueKindError: presence-only argument (no kind to check against).
        - DefaultTypeMismatchError: missing default, or a default that does not fit the kind.
        """
        if self._kind is None:
            raise MissingValueKindError(
                "argument '--%s' takes no value and cannot accept a default" % self._name,
                title="missing value kind",
                code=FaultCode.MISSING_VALUE_KIND,
                argument=self,
                hint="declare '--%s' with a kind or drop its default" % self._name,
                docs=getdoc(FaultCode.MISSING_VALUE_KIND),
            )
        if self._default is Unset:
            raise DefaultTypeMismatchError(
                "argument '--%s' has no default to accept" % self._name,
                title="default type mismatch",
                code=FaultCode.DEFAULT_TYPE_MISMATCH,
                argument=self,
                kind=self._kind,
                hint="declare '--%s' with Arg.with_default_value(...)" % self._name,
                docs=getdoc(FaultCode.DEFAULT_TYPE_MISMATCH),
            )
        try:
            self._value = self._kind.coerce(self._default)
        except TypeError as exception:
            raise DefaultTypeMismatchError(
                "default %r of argument '--%s' does not match its kind %s" % (self._default, self._name, self._kind),
                title="default type mismatch",
                code=FaultCode.DEFAULT_TYPE_MISMATCH,
                argument=self,
                kind=self._kind,
                hint="give '--%s' a default that fits %s" % (self._name, self._kind),
                docs=getdoc(FaultCode.DEFAULT_TYPE_MISMATCH),
            ) from exception

    def format_value(self):
        """
        canonical text of the current value; empty when unset or presence-only.
        """
        if self._kind is None or self._value is Unset:
            return ""
        return self._kind.format(self._value)

    def format_default(self):
        if self._kind is None or self._default is Unset:
            return ""
        try:
            return self._kind.format(self._default)
        except TypeError:
            return ""

    # run-scoped state, written by CliArguments.parse only

    def _reset(self):
        self._seen = False
        self._value = Unset

    def _mark(self):
        # a later occurrence replaces whatever an earlier one stored
        self._seen = True
        self._value = True if self._kind is None else Unset

    def _store(self, value):
        self._value = value

    def __str__(self):
        if self._kind is None:
            return "--%s" % self._name
        return "--%s=%s" % (self._name, self.format_value() if self._value is not Unset else "None")


__all__ = (
    # Public API surface for consumers of parg.arguments.
    # These names are re-exported from the package __init__.
    "Arg",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
