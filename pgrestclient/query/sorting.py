"""The ``order`` parameter."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from pgrestclient.types import NullsPosition, SortOrder

__all__ = ("Order",)


@dataclass(frozen=True)
class Order:
    """A single ordering key.

    This renders as ``column[.asc|.desc][.nullsfirst|.nullslast]``.

    When ``top`` is set on a key of an embedded query, the key is used to
    order the rows of the root query instead. It's written in the root
    ``order`` parameter as ``embedded(column)``.
    """

    column: str
    direction: SortOrder | None = None
    nulls: NullsPosition | None = None
    top: bool = False

    def __post_init__(self):
        # Allow passing the plain strings
        if self.direction is not None:
            object.__setattr__(self, "direction", SortOrder(self.direction))
        if self.nulls is not None:
            object.__setattr__(self, "nulls", NullsPosition(self.nulls))

    @classmethod
    def from_value(cls, value: Order | Mapping | str) -> Order:
        """Parse the input of ``Query.order()``.

        This accepts an :class:`Order`, a plain column name or a dict such as
        ``{"column": "name", "direction": "desc", "nulls": "first"}``.
        """
        if isinstance(value, Order):
            return value
        elif isinstance(value, str):
            return cls(column=value)
        elif isinstance(value, Mapping):
            unknown = set(value) - {"column", "direction", "order", "nulls", "top"}
            if unknown:
                raise TypeError(f"Unexpected ordering keys: {', '.join(sorted(unknown))}")
            return cls(
                column=value["column"],
                # "order" is accepted as alias, it's how the option is named in the protocol docs.
                direction=value.get("direction", value.get("order")),
                nulls=value.get("nulls"),
                top=bool(value.get("top", False)),
            )
        else:
            raise TypeError(f"Invalid ordering: {value!r}")

    def as_string(self, column: str | None = None) -> str:
        """Render the ordering key.

        :param column: Override the written column (used for embedded paths).
        """
        result = column or self.column
        if self.direction is not None:
            result += f".{self.direction.value}"
        if self.nulls is not None:
            result += f".nulls{self.nulls.value}"
        return result

    def as_object(self) -> dict:
        data = {"column": self.column}
        if self.direction is not None:
            data["direction"] = self.direction.value
        if self.nulls is not None:
            data["nulls"] = self.nulls.value
        if self.top:
            data["top"] = True
        return data
