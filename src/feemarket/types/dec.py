"""
Fixed-Point Decimal Type.

Prices, learning rates and adaptation constants are all expressed as `Dec`:
a signed rational with exactly 18 fractional decimal digits. Internally a
`Dec` is a Python integer scaled by 10**18, so every operation is exact
integer arithmetic and therefore deterministic on every machine.

Rounding rules:

- Multiplication of two decimals truncates toward zero.
- Division truncates toward zero; `quo_ceil` rounds toward +infinity.
- Conversion to an integer is explicit: truncate, ceil, or round half
  away from zero.
"""

from __future__ import annotations

import re
from fractions import Fraction
from typing import Any, ClassVar, Final

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import ArithmeticOverflowError, DivisionByZeroError

PRECISION: Final = 18
"""Number of fractional decimal digits."""

_ONE_RAW: Final = 10**PRECISION

MAX_BIT_LENGTH: Final = 256 + 60
"""
Largest bit length of a scaled value.

256 bits of integer magnitude plus the ~60 bits consumed by the 10**18 scale.
"""

_DEC_PATTERN = re.compile(r"^(-)?(\d+)(?:\.(\d+))?$")


def _quo_trunc(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def _quo_ceil(numerator: int, denominator: int) -> int:
    """Integer division rounding toward +infinity."""
    return -((-numerator) // denominator)


class Dec:
    """
    A signed fixed-point decimal with 18 fractional digits.

    Construct from an `int` (whole units), a decimal string such as
    `"0.125"`, or another `Dec`. Floats are rejected.

    Example:
        >>> Dec("1.5") * Dec(2)
        Dec('3.000000000000000000')
    """

    PRECISION: ClassVar[int] = PRECISION
    """Number of fractional decimal digits."""

    __slots__ = ("_raw",)

    def __init__(self, value: int | str | Dec = 0) -> None:
        if isinstance(value, Dec):
            raw = value._raw
        elif isinstance(value, bool):
            raise TypeError("Expected int, str or Dec, got bool")
        elif isinstance(value, int):
            raw = value * _ONE_RAW
        elif isinstance(value, str):
            raw = self._parse(value)
        else:
            raise TypeError(f"Expected int, str or Dec, got {type(value).__name__}")
        self._raw = self._check_range(raw)

    @staticmethod
    def _parse(text: str) -> int:
        """Parse a decimal string into its scaled integer representation."""
        match = _DEC_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"invalid decimal string: {text!r}")

        sign, whole, fraction = match.groups()
        fraction = fraction or ""
        if len(fraction) > PRECISION:
            raise ValueError(
                f"invalid decimal string: {text!r} has more than {PRECISION} fractional digits"
            )

        raw = int(whole) * _ONE_RAW + int(fraction.ljust(PRECISION, "0") or "0")
        return -raw if sign else raw

    @staticmethod
    def _check_range(raw: int) -> int:
        if raw.bit_length() > MAX_BIT_LENGTH:
            raise ArithmeticOverflowError(raw.bit_length(), MAX_BIT_LENGTH)
        return raw

    @classmethod
    def from_raw(cls, raw: int) -> Self:
        """Build a decimal directly from its scaled integer representation."""
        dec = cls.__new__(cls)
        dec._raw = cls._check_range(raw)
        return dec

    @classmethod
    def zero(cls) -> Self:
        """The decimal 0."""
        return cls.from_raw(0)

    @classmethod
    def one(cls) -> Self:
        """The decimal 1."""
        return cls.from_raw(_ONE_RAW)

    @property
    def raw(self) -> int:
        """The integer scaled by 10**18."""
        return self._raw

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def is_zero(self) -> bool:
        return self._raw == 0

    def is_negative(self) -> bool:
        return self._raw < 0

    def is_positive(self) -> bool:
        return self._raw > 0

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce(other: Any) -> Dec | None:
        """Promote ints to decimals; anything else is unsupported."""
        if isinstance(other, Dec):
            return other
        if isinstance(other, int) and not isinstance(other, bool):
            return Dec(other)
        return None

    def __add__(self, other: Any) -> Dec:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return Dec.from_raw(self._raw + rhs._raw)

    __radd__ = __add__

    def __sub__(self, other: Any) -> Dec:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return Dec.from_raw(self._raw - rhs._raw)

    def __rsub__(self, other: Any) -> Dec:
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return Dec.from_raw(lhs._raw - self._raw)

    def __neg__(self) -> Dec:
        return Dec.from_raw(-self._raw)

    def __abs__(self) -> Dec:
        return Dec.from_raw(abs(self._raw))

    def __mul__(self, other: Any) -> Dec:
        """
        Multiply, truncating toward zero.

        Multiplying by an `int` is exact since the scale is unchanged.
        """
        if isinstance(other, int) and not isinstance(other, bool):
            return Dec.from_raw(self._raw * other)
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return Dec.from_raw(_quo_trunc(self._raw * rhs._raw, _ONE_RAW))

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> Dec:
        """Divide, truncating toward zero."""
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        if rhs._raw == 0:
            raise DivisionByZeroError()
        return Dec.from_raw(_quo_trunc(self._raw * _ONE_RAW, rhs._raw))

    def __rtruediv__(self, other: Any) -> Dec:
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return lhs / self

    def quo_ceil(self, other: Dec | int) -> Dec:
        """Divide, rounding toward +infinity."""
        rhs = self._coerce(other)
        if rhs is None:
            raise TypeError(f"Expected int or Dec, got {type(other).__name__}")
        if rhs._raw == 0:
            raise DivisionByZeroError()
        numerator, denominator = self._raw * _ONE_RAW, rhs._raw
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        return Dec.from_raw(_quo_ceil(numerator, denominator))

    # -------------------------------------------------------------------------
    # Conversion to integers
    # -------------------------------------------------------------------------

    def truncate_int(self) -> int:
        """Drop the fractional part (round toward zero)."""
        return _quo_trunc(self._raw, _ONE_RAW)

    def ceil_int(self) -> int:
        """Round toward +infinity."""
        return _quo_ceil(self._raw, _ONE_RAW)

    def round_int(self) -> int:
        """Round to the nearest integer, halves away from zero."""
        quotient, remainder = divmod(abs(self._raw), _ONE_RAW)
        if 2 * remainder >= _ONE_RAW:
            quotient += 1
        return -quotient if self._raw < 0 else quotient

    def __int__(self) -> int:
        return self.truncate_int()

    def __float__(self) -> float:
        """Approximate value for display and metrics only."""
        return self._raw / _ONE_RAW

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._raw == rhs._raw

    def __lt__(self, other: Any) -> bool:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._raw < rhs._raw

    def __le__(self, other: Any) -> bool:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._raw <= rhs._raw

    def __gt__(self, other: Any) -> bool:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._raw > rhs._raw

    def __ge__(self, other: Any) -> bool:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return self._raw >= rhs._raw

    def __hash__(self) -> int:
        # Equal to the hash of the int a whole value compares equal to.
        return hash(Fraction(self._raw, _ONE_RAW))

    # -------------------------------------------------------------------------
    # Representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Canonical text form: `[-]<integer>.<18 digits>`."""
        whole, fraction = divmod(abs(self._raw), _ONE_RAW)
        sign = "-" if self._raw < 0 else ""
        return f"{sign}{whole}.{fraction:0{PRECISION}d}"

    def __repr__(self) -> str:
        return f"Dec('{self}')"

    # -------------------------------------------------------------------------
    # Pydantic integration
    # -------------------------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Validate from Dec, int or decimal string; serialize to the canonical string."""

        def validate(value: Any) -> Dec:
            try:
                return cls(value)
            except (TypeError, ArithmeticOverflowError) as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda instance: str(instance)
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Describe the canonical string encoding."""
        return {
            "type": "string",
            "pattern": r"^-?\d+\.\d{18}$",
            "format": "dec18",
        }
