"""Unsigned integer types."""

from __future__ import annotations

import operator
from typing import Any, Callable, ClassVar

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self


class BaseUint(int):
    """A bounded unsigned integer that stays an `int` for comparisons and hashing."""

    BITS: ClassVar[int]
    """Width of the integer, set by subclasses."""

    def __new__(cls, value: Any) -> Self:
        """
        Create a range-checked value.

        Only genuine integers are accepted. Booleans, floats and strings are
        rejected so that gas amounts never come from lossy conversions.

        Raises:
            TypeError: If `value` is not an `int`.
            OverflowError: If `value` is outside [0, 2**BITS - 1].
        """
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        if not 0 <= value < 2**cls.BITS:
            raise OverflowError(f"{int(value)} is out of range for {cls.__name__}")
        return super().__new__(cls, value)

    @classmethod
    def max_value(cls) -> Self:
        """The largest representable value."""
        return cls(2**cls.BITS - 1)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Validate through the constructor in both Python and JSON modes."""

        def validate(value: Any) -> BaseUint:
            try:
                return cls(value)
            except (OverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        # A plain validator keeps decoded JSON values typed instead of plain ints.
        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(int),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Describe the type as a bounded integer."""
        return {
            "type": "integer",
            "minimum": 0,
            "maximum": 2**cls.BITS - 1,
            "format": f"uint{cls.BITS}",
        }

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------
    #
    # Operands must share the type, and every result is range-checked by the
    # constructor. Mixing with plain ints goes through explicit `int(...)`.

    def _apply(self, other: Any, symbol: str, op: Callable[[int, int], int]) -> Self:
        if not isinstance(other, type(self)):
            raise TypeError(
                f"Unsupported operand type(s) for {symbol}: "
                f"'{type(self).__name__}' and '{type(other).__name__}'"
            )
        return type(self)(op(int(self), int(other)))

    def __add__(self, other: Any) -> Self:
        return self._apply(other, "+", operator.add)

    def __sub__(self, other: Any) -> Self:
        return self._apply(other, "-", operator.sub)

    def __mul__(self, other: Any) -> Self:
        return self._apply(other, "*", operator.mul)

    def __floordiv__(self, other: Any) -> Self:
        return self._apply(other, "//", operator.floordiv)

    def __mod__(self, other: Any) -> Self:
        return self._apply(other, "%", operator.mod)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        return str(int(self))

    def __hash__(self) -> int:
        return int.__hash__(self)


class Uint64(BaseUint):
    """A 64-bit unsigned integer, used for gas amounts and window positions."""

    BITS = 64
