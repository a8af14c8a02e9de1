r"""
parg value kinds: the closed set of primitive payloads an argument may carry.

Overview
- Kind: enumeration of every supported kind (u8 … u128, usize, i8 … i128, isize,
  f32, f64, bool, char, string). Each member knows its native Python type, its
  zero-equivalent sample, and how to parse, coerce and format values.
- Native types
  • Integer widths: sealed int subclasses (u8, u16, …, isize) that refuse
    out-of-range values at construction.
  • Float widths: float subclasses; f32 rounds to single precision.
  • char: str subclass holding exactly one character.
  • bool and str are used as-is for the bool and string kinds.

Conversion rules (text → value)
- Integers: base 10, ASCII digits only, optional sign ('+' only for unsigned),
  no whitespace, no underscores, range-checked against the width.
- Floats: decimal/exponent forms plus inf, infinity and nan (case-insensitive).
  f32 overflow saturates to ±inf.
- bool: exactly "true" or "false".
- char: exactly one character.
- string: verbatim.

Canonical text (value → text)
- format() emits the text parse() reads back, so parse(format(v)) == v for every
  value of a kind (nan aside, which never equals itself).

Quick example:
    >>> Kind.U8.parse("200")
    u8(200)
    >>> Kind.of(u8) is Kind.U8
    True
    >>> Kind.F32.format(0.1)
    '0.1'
"""
import enum
import math
import re
import struct

from .utils import Unset

POINTER_BITS = struct.calcsize("P") * 8

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:inf|infinity|nan|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:e[+-]?[0-9]+)?)", re.IGNORECASE)


class Integer(int):
    """
    Base of the fixed-width integer types.

    Subclasses declare their width with class keywords:

        class u8(Integer, bits=8, signed=False): ...

    and get min/max bounds computed from it. Instances are plain ints for
    arithmetic purposes; only construction is range-checked.
    """
    __slots__ = ()

    bits = 0
    signed = False
    min = 0
    max = 0

    def __init_subclass__(cls, /, bits, signed, **options):
        super().__init_subclass__(**options)
        cls.bits = bits
        cls.signed = signed
        cls.min = -(1 << (bits - 1)) if signed else 0
        cls.max = (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1

    def __new__(cls, value=0, /):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{cls.__name__}() argument must be an integer, not {type(value).__name__!r}")
        if not cls.min <= value <= cls.max:
            raise OverflowError(f"{int(value)} does not fit in {cls.__name__} [{cls.min}, {cls.max}]")
        return super().__new__(cls, value)

    __str__ = int.__repr__

    def __repr__(self):
        return "%s(%d)" % (type(self).__name__, self)


class Float(float):
    """
    Base of the floating-point widths; subclasses declare bits=32 or bits=64.
    """
    __slots__ = ()

    bits = 64

    def __init_subclass__(cls, /, bits, **options):
        super().__init_subclass__(**options)
        cls.bits = bits

    def __new__(cls, value=0.0, /):
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError(f"{cls.__name__}() argument must be a real number, not {type(value).__name__!r}")
        value = float(value)
        if cls.bits == 32:
            value = _single(value)
        return super().__new__(cls, value)

    def __str__(self):
        return _shortest(float(self), type(self).bits)

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self)


class u8(Integer, bits=8, signed=False): __slots__ = ()
class u16(Integer, bits=16, signed=False): __slots__ = ()
class u32(Integer, bits=32, signed=False): __slots__ = ()
class u64(Integer, bits=64, signed=False): __slots__ = ()
class u128(Integer, bits=128, signed=False): __slots__ = ()
class usize(Integer, bits=POINTER_BITS, signed=False): __slots__ = ()
class i8(Integer, bits=8, signed=True): __slots__ = ()
class i16(Integer, bits=16, signed=True): __slots__ = ()
class i32(Integer, bits=32, signed=True): __slots__ = ()
class i64(Integer, bits=64, signed=True): __slots__ = ()
class i128(Integer, bits=128, signed=True): __slots__ = ()
class isize(Integer, bits=POINTER_BITS, signed=True): __slots__ = ()
class f32(Float, bits=32): __slots__ = ()
class f64(Float, bits=64): __slots__ = ()


class char(str):
    """
    A single character (one code point).
    """
    __slots__ = ()

    def __new__(cls, value, /):
        if not isinstance(value, str):
            raise TypeError(f"char() argument must be a string, not {type(value).__name__!r}")
        if len(value) != 1:
            raise ValueError(f"char() argument must be exactly one character, got {len(value)}")
        return super().__new__(cls, value)

    def __repr__(self):
        return "char(%s)" % str.__repr__(self)


def _single(value):
    # round-to-nearest into IEEE-754 binary32; values past the range saturate like a C cast
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _shortest(value, bits):
    """
    shortest decimal text that reads back to the same value at the given width.
    """
    if bits == 64 or not math.isfinite(value):
        return float.__repr__(value)
    for digits in range(1, 10):
        text = "%.*g" % (digits, value)
        if _single(float(text)) == value:
            break
    if not set(text) & set(".en"):
        text += ".0"
    return text


def _parse_integer(token, cls):
    if not token:
        raise ValueError("cannot parse integer from empty string")
    if not _INTEGER.fullmatch(token) or (token[0] == "-" and not cls.signed):
        raise ValueError("invalid digit found in string")
    negative = token[0] == "-"
    # u128 needs 39 digits at most; anything longer only matters for its sign
    if len(token.lstrip("+-").lstrip("0")) > 40:
        raise ValueError("number too %s to fit in target type" % ("small" if negative else "large"))
    value = int(token, 10)
    if value > cls.max:
        raise ValueError("number too large to fit in target type")
    if value < cls.min:
        raise ValueError("number too small to fit in target type")
    return cls(value)


def _parse_float(token, cls):
    if not token:
        raise ValueError("cannot parse float from empty string")
    if not _FLOAT.fullmatch(token):
        raise ValueError("invalid float literal")
    return cls(float(token))


def _parse_bool(token):
    match token:
        case "true":
            return True
        case "false":
            return False
    raise ValueError("provided string was not `true` or `false`")


def _parse_char(token):
    if not token:
        raise ValueError("cannot parse char from empty string")
    if len(token) > 1:
        raise ValueError("too many characters in string")
    return char(token)


class Kind(enum.Enum):
    """
    closed set of value kinds a value-taking argument can be declared with.

    each member carries
    - value: the short label used in messages and usage ("u8", "f64", "string", …).
    - type: the native Python type its values are returned as.

    members compare by identity; two kinds never share a native type, so a type
    requested at retrieval resolves to at most one kind (see Kind.of).
    """

    U8 = ("u8", u8)
    U16 = ("u16", u16)
    U32 = ("u32", u32)
    U64 = ("u64", u64)
    U128 = ("u128", u128)
    USIZE = ("usize", usize)
    I8 = ("i8", i8)
    I16 = ("i16", i16)
    I32 = ("i32", i32)
    I64 = ("i64", i64)
    I128 = ("i128", i128)
    ISIZE = ("isize", isize)
    F32 = ("f32", f32)
    F64 = ("f64", f64)
    BOOL = ("bool", bool)
    CHAR = ("char", char)
    STRING = ("string", str)

    def __new__(cls, label, type):
        self = object.__new__(cls)
        self._value_ = label
        self.type = type
        return self

    def __str__(self):
        return self.value

    @property
    def label(self):
        return self.value

    @property
    def sample(self):
        """
        zero-equivalent value of the kind; only ever used for identity and display.
        """
        if self is Kind.CHAR:
            return char("0")
        return self.type()

    @classmethod
    def of(cls, object, default=Unset, /):
        """
        resolve a Kind member or a native type (u8, f64, bool, str, …) to its Kind.

        builtin int and float are not kinds: they cannot tell a width apart.
        raises TypeError when nothing matches and no default is given.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, type) and object in _BY_TYPE:
            return _BY_TYPE[object]
        if default is not Unset:
            return default
        raise TypeError(f"{object!r} is not a value kind")

    def parse(self, token, /):
        """
        convert a raw token into a value of this kind.

        raises ValueError carrying the reason when the token is not a valid literal.
        """
        if not isinstance(token, str):
            raise TypeError(f"token must be a string, not {type(token).__name__!r}")
        if issubclass(self.type, Integer):
            return _parse_integer(token, self.type)
        if issubclass(self.type, Float):
            return _parse_float(token, self.type)
        if self is Kind.BOOL:
            return _parse_bool(token)
        if self is Kind.CHAR:
            return _parse_char(token)
        return str(token)

    def coerce(self, value, /):
        """
        check a Python value against this kind and return it as the native type.

        numbers are accepted across widths as long as they fit (42 is a valid u8,
        300 is not); bool is never accepted as a number. raises TypeError otherwise.
        """
        if self is Kind.BOOL:
            if isinstance(value, bool):
                return value
        elif self is Kind.STRING:
            if isinstance(value, str):
                return str(value)
        else:
            try:
                return self.type(value)
            except (TypeError, ValueError, OverflowError) as exception:
                raise TypeError(f"{value!r} is not a valid {self.label} value: {exception}") from None
        raise TypeError(f"{value!r} is not a valid {self.label} value")

    def format(self, value, /):
        """
        canonical text of a value, the same text parse() accepts.
        """
        value = self.coerce(value)
        if self is Kind.BOOL:
            return "true" if value else "false"
        return str(value)


_BY_TYPE = {kind.type: kind for kind in Kind}


__all__ = (
    "Kind",
    "Integer",
    "Float",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "usize",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "isize",
    "f32",
    "f64",
    "char",
    "POINTER_BITS",
)
