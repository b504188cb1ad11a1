"""
Joint position value types.

A joint position is a fixed vector of six axis values. Robot joint positions
hold the six internal axes in degrees and default to 0. External joint
positions hold up to six logical external axes (a..f) and default to
"unconnected": such axes are stored as ``None`` and only turn into the
legacy 9E9 sentinel when written to RAPID or serialized.
"""

import math
import numbers
import operator
from typing import Any, Callable, ClassVar, Iterator, Optional, Union

from rapidkin.core.exceptions import (
    AxisMismatchError,
    JointDivisionByZeroError,
    JointPositionError,
)
from rapidkin.core.rapid import (
    Declaration,
    Scope,
    VariableType,
    format_values,
    read_declaration_metadata,
)

#: Legacy numeric value for an unconnected external axis.
UNDEFINED_AXIS = 9e9

#: Logical external axis letters, in index order.
AXIS_LETTERS = "abcdef"

AxisKey = Union[int, str]
AxisValue = Optional[float]

NUMBER_OF_AXES = 6


def axis_index(key: AxisKey) -> int:
    """
    Resolve an index (0..5) or a logical axis letter (a..f, A..F) to an index.

    Raises:
        IndexError: If the key does not name one of the six axes
    """
    if isinstance(key, str):
        letter = key.strip().lower()
        if len(letter) != 1 or letter not in AXIS_LETTERS:
            raise IndexError(f"Unknown axis letter: {key!r}")
        return AXIS_LETTERS.index(letter)
    if isinstance(key, bool) or not isinstance(key, numbers.Integral):
        raise IndexError(f"Axis index must be an int or a letter, got {key!r}")
    if not 0 <= key < NUMBER_OF_AXES:
        raise IndexError(f"Axis index out of range: {key}")
    return int(key)


class JointPosition(Declaration):
    """
    Shared behavior of robot and external joint positions.

    Arithmetic is element-wise with another position of the same kind or
    with a scalar, and always returns a new position.
    """

    default_value: ClassVar[AxisValue] = 0.0

    def __init__(
        self,
        *values: Any,
        name: str = "",
        scope: Scope = Scope.GLOBAL,
        variable_type: VariableType = VariableType.VAR,
    ) -> None:
        if len(values) == 1 and not isinstance(values[0], numbers.Real) and values[0] is not None:
            values = tuple(values[0])
        if len(values) > NUMBER_OF_AXES:
            raise JointPositionError(
                f"A joint position has {NUMBER_OF_AXES} axes, got {len(values)} values"
            )

        self._values: list[AxisValue] = [self._coerce(v) for v in values]
        self._values += [self.default_value] * (NUMBER_OF_AXES - len(self._values))
        self.name = name
        self.scope = Scope(scope)
        self.variable_type = VariableType(variable_type)

    @classmethod
    def _coerce(cls, value: Any) -> AxisValue:
        if value is None:
            return cls.default_value
        value = float(value)
        if math.isnan(value):
            return cls.default_value
        return value

    def _key(self, key: AxisKey) -> int:
        return axis_index(key)

    def __getitem__(self, key: AxisKey) -> AxisValue:
        return self._values[self._key(key)]

    def __setitem__(self, key: AxisKey, value: Any) -> None:
        self._values[self._key(key)] = self._coerce(value)

    def __len__(self) -> int:
        return NUMBER_OF_AXES

    def __iter__(self) -> Iterator[AxisValue]:
        return iter(list(self._values))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        values = ", ".join(repr(v) for v in self._values)
        return f"{type(self).__name__}({values})"

    @property
    def values(self) -> list[AxisValue]:
        return list(self._values)

    @property
    def is_valid(self) -> bool:
        return True

    @classmethod
    def _from_values(cls, values: list[AxisValue], **metadata: Any) -> "JointPosition":
        # computed values skip input coercion, so no result turns unconnected
        position = cls(**metadata)
        position._values = list(values)
        return position

    def copy(self) -> "JointPosition":
        """Return an independent copy, declaration metadata included."""
        return self._from_values(
            self._values,
            name=self.name,
            scope=self.scope,
            variable_type=self.variable_type,
        )

    def reset(self) -> None:
        """Set every axis back to the default value."""
        self._values = [self.default_value] * NUMBER_OF_AXES

    # -- arithmetic --------------------------------------------------------

    def _combine(
        self,
        other: Any,
        op: Callable[[float, float], float],
        divide: bool = False,
    ) -> "JointPosition":
        if isinstance(other, JointPosition):
            if type(other) is not type(self):
                return NotImplemented
            result: list[AxisValue] = []
            for index, (a, b) in enumerate(zip(self._values, other._values)):
                if a is None and b is None:
                    result.append(None)
                elif a is None or b is None:
                    raise AxisMismatchError(
                        f"Cannot combine a defined and an undefined value on axis {index}",
                        axis=index,
                    )
                elif divide and b == 0:
                    raise JointDivisionByZeroError(
                        f"Division by zero on axis {index}", axis=index
                    )
                else:
                    result.append(op(a, b))
            return self._from_values(result)

        if isinstance(other, numbers.Real) and not isinstance(other, bool):
            if divide and other == 0:
                raise JointDivisionByZeroError("Division of a joint position by zero")
            scalar = float(other)
            return self._from_values([None if a is None else op(a, scalar) for a in self._values])

        return NotImplemented

    def __add__(self, other: Any) -> "JointPosition":
        return self._combine(other, operator.add)

    def __radd__(self, other: Any) -> "JointPosition":
        return self._combine(other, lambda a, b: b + a)

    def __sub__(self, other: Any) -> "JointPosition":
        return self._combine(other, operator.sub)

    def __rsub__(self, other: Any) -> "JointPosition":
        return self._combine(other, lambda a, b: b - a)

    def __mul__(self, other: Any) -> "JointPosition":
        return self._combine(other, operator.mul)

    def __rmul__(self, other: Any) -> "JointPosition":
        return self._combine(other, lambda a, b: b * a)

    def __truediv__(self, other: Any) -> "JointPosition":
        return self._combine(other, operator.truediv, divide=True)

    def __neg__(self) -> "JointPosition":
        return self * -1.0

    # -- reductions --------------------------------------------------------

    def _defined(self) -> list[float]:
        return [v for v in self._values if v is not None]

    def sum(self) -> float:
        """Sum of all defined axis values."""
        return sum(self._defined())

    def norm_sq(self) -> float:
        """Squared Euclidean norm over the defined axis values."""
        return sum(v * v for v in self._defined())

    def norm(self) -> float:
        """Euclidean norm over the defined axis values."""
        return math.sqrt(self.norm_sq())

    # -- RAPID and serialization ------------------------------------------

    def to_rapid(self) -> str:
        return format_values(self._values)

    def to_list(self) -> list[float]:
        return [UNDEFINED_AXIS if v is None else v for v in self._values]

    def to_dict(self) -> dict[str, Any]:
        data = self._declaration_dict()
        data["values"] = self.to_list()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JointPosition":
        return cls(data.get("values", []), **read_declaration_metadata(data))

    def __str__(self) -> str:
        return self.to_rapid()


class RobotJointPosition(JointPosition):
    """
    The six internal axis values of a robot, in degrees.

    Example:
        >>> position = RobotJointPosition(0, 0, 0, 0, 45, 0)
        >>> position.to_rapid()
        '[0, 0, 0, 0, 45, 0]'
    """

    datatype = "robjoint"
    default_value = 0.0

    def _key(self, key: AxisKey) -> int:
        if isinstance(key, str):
            raise IndexError("Robot joint positions are indexed by number, not letter")
        return axis_index(key)


class ExternalJointPosition(JointPosition):
    """
    Values of up to six logical external axes (a..f).

    Axes without a value are unconnected. Passing ``None``, NaN or the legacy
    9E9 sentinel for an axis leaves it unconnected.

    Example:
        >>> position = ExternalJointPosition(500)
        >>> position["a"], position["b"]
        (500.0, None)
        >>> position.to_rapid()
        '[500, 9E9, 9E9, 9E9, 9E9, 9E9]'
    """

    datatype = "extjoint"
    default_value = None

    @classmethod
    def _coerce(cls, value: Any) -> AxisValue:
        coerced = super()._coerce(value)
        if coerced is not None and coerced == UNDEFINED_AXIS:
            return None
        return coerced

    def is_defined(self, key: AxisKey) -> bool:
        return self[key] is not None

    def defined_axes(self) -> list[int]:
        """Indexes of the axes that hold a value."""
        return [index for index, value in enumerate(self._values) if value is not None]

    def value_or(self, key: AxisKey, default: float) -> float:
        """Return the axis value, or ``default`` when the axis is unconnected."""
        value = self[key]
        return default if value is None else value

    @classmethod
    def undefined(cls) -> "ExternalJointPosition":
        return cls()
