"""
RAPID data declarations.

Every value that can appear in an ABB RAPID program (joint positions,
targets, tool data) carries a declaration name, a scope and a variable type,
and can render itself as a RAPID literal and as a full declaration line::

    LOCAL CONST robtarget pHome := [[300, 0, 500], [0, 0, 1, 0], [0, 0, 0, 0], [9E9, ...]];
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, ClassVar, Iterable, Optional

#: Version written by ``to_dict``; older payloads are read with defaults.
SERIALIZATION_VERSION = 3_000_000

#: First serialization version that stores scope and variable type.
SCOPED_DECLARATION_VERSION = 2_000_000

#: RAPID literal for an unconnected external axis.
UNDEFINED_LITERAL = "9E9"


class Scope(IntEnum):
    """Visibility of a RAPID declaration."""

    GLOBAL = 0
    LOCAL = 1
    TASK = 2


class VariableType(IntEnum):
    """Storage class of a RAPID declaration."""

    PERS = 0
    VAR = 1
    CONST = 2


def format_number(value: float, decimals: int = 2) -> str:
    """
    Format a number the way RAPID literals are written.

    Up to ``decimals`` digits after the point are kept and trailing zeros are
    dropped, so ``45.0`` becomes ``"45"`` and ``0.1234`` becomes ``"0.12"``.

    Args:
        value: Number to format
        decimals: Maximum number of decimals

    Returns:
        Formatted number
    """
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_values(values: Iterable[Optional[float]], decimals: int = 2) -> str:
    """Format a sequence as a bracketed RAPID array; ``None`` renders as 9E9."""
    items = [
        UNDEFINED_LITERAL if value is None else format_number(value, decimals)
        for value in values
    ]
    return "[" + ", ".join(items) + "]"


def read_declaration_metadata(
    data: dict[str, Any],
    default_variable_type: VariableType = VariableType.VAR,
) -> dict[str, Any]:
    """
    Extract name, scope and variable type from a serialized declaration.

    Scope and variable type only exist from SCOPED_DECLARATION_VERSION on;
    older payloads fall back to a global declaration of
    ``default_variable_type``.
    """
    version = int(data.get("version", 0))
    metadata: dict[str, Any] = {
        "name": data.get("name", ""),
        "scope": Scope.GLOBAL,
        "variable_type": default_variable_type,
    }
    if version >= SCOPED_DECLARATION_VERSION:
        metadata["scope"] = Scope(int(data.get("scope", Scope.GLOBAL)))
        metadata["variable_type"] = VariableType(
            int(data.get("variable_type", default_variable_type))
        )
    return metadata


class Declaration(ABC):
    """
    Base class for values that can be declared in a RAPID program.

    Subclasses provide ``datatype`` and ``to_rapid``; instances carry
    ``name``, ``scope`` and ``variable_type`` attributes.
    """

    datatype: ClassVar[str] = ""

    name: str
    scope: Scope
    variable_type: VariableType

    @abstractmethod
    def to_rapid(self) -> str:
        """Return the RAPID literal of this value."""

    def to_rapid_declaration(self) -> str:
        """
        Return the RAPID declaration line, or an empty string if unnamed.
        """
        if not self.name:
            return ""

        prefix = ""
        if self.scope == Scope.LOCAL:
            prefix = "LOCAL "
        elif self.scope == Scope.TASK:
            prefix = "TASK "

        return (
            f"{prefix}{self.variable_type.name} {self.datatype} "
            f"{self.name} := {self.to_rapid()};"
        )

    def _declaration_dict(self) -> dict[str, Any]:
        return {
            "version": SERIALIZATION_VERSION,
            "name": self.name,
            "scope": int(self.scope),
            "variable_type": int(self.variable_type),
        }
