"""
Filter schemas: product / retailer selections and date windows.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

ALL = "all"

Selection = Union[str, frozenset]


class InvalidFilterSpec(ValueError):
    """A filter that cannot be evaluated (unknown window kind, bad dates, ...)."""


class WindowKind(str, Enum):
    ALL = "all"
    MONTH = "month"
    CUSTOM = "custom"


def _check_iso_date(value: str, name: str) -> None:
    try:
        dt.date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidFilterSpec(f"{name} must be YYYY-MM-DD, got {value!r}") from None


def _check_month(value: str) -> None:
    try:
        dt.datetime.strptime(value, "%Y-%m")
    except (TypeError, ValueError):
        raise InvalidFilterSpec(f"month must be YYYY-MM, got {value!r}") from None
    if len(value) != 7:
        raise InvalidFilterSpec(f"month must be YYYY-MM, got {value!r}")


@dataclass(frozen=True)
class DateWindow:
    """Date constraint of a filter: all time, one calendar month, or a custom range."""
    kind: WindowKind = WindowKind.ALL
    month: Optional[str] = None          # YYYY-MM
    start: Optional[str] = None          # YYYY-MM-DD, inclusive
    end: Optional[str] = None            # YYYY-MM-DD, inclusive

    def __post_init__(self) -> None:
        try:
            kind = WindowKind(self.kind)
        except ValueError:
            raise InvalidFilterSpec(f"Invalid date window kind: {self.kind!r}") from None
        object.__setattr__(self, "kind", kind)

        if kind == WindowKind.MONTH:
            if not self.month:
                raise InvalidFilterSpec("month window requires a month")
            _check_month(self.month)
        elif kind == WindowKind.CUSTOM:
            if not self.start or not self.end:
                raise InvalidFilterSpec("custom window requires start and end")
            _check_iso_date(self.start, "start")
            _check_iso_date(self.end, "end")
            if self.start > self.end:
                raise InvalidFilterSpec(f"start {self.start} is after end {self.end}")

    @classmethod
    def all_time(cls) -> "DateWindow":
        return cls(WindowKind.ALL)

    @classmethod
    def for_month(cls, month: str) -> "DateWindow":
        return cls(WindowKind.MONTH, month=month)

    @classmethod
    def between(cls, start: str, end: str) -> "DateWindow":
        return cls(WindowKind.CUSTOM, start=start, end=end)

    @property
    def label(self) -> str:
        """Human-readable label for the window."""
        if self.kind == WindowKind.MONTH:
            return f"{dt.datetime.strptime(self.month, '%Y-%m'):%B %Y}"
        if self.kind == WindowKind.CUSTOM:
            return f"{self.start} to {self.end}"
        return "All Time"

    def previous(self) -> "DateWindow":
        """The window of the same length immediately preceding this one.

        All-time windows have no predecessor and return themselves.
        """
        if self.kind == WindowKind.MONTH:
            first = dt.datetime.strptime(self.month, "%Y-%m").date()
            prev_last = first - dt.timedelta(days=1)
            return DateWindow.for_month(f"{prev_last:%Y-%m}")

        if self.kind == WindowKind.CUSTOM:
            start = dt.date.fromisoformat(self.start)
            end = dt.date.fromisoformat(self.end)
            duration = end - start
            new_end = start - dt.timedelta(days=1)
            new_start = new_end - duration
            return DateWindow.between(new_start.isoformat(), new_end.isoformat())

        return self


def as_selection(value) -> Selection:
    """Normalise None, "all", a single value or an iterable to ALL or a frozenset."""
    if value is None or value == ALL:
        return ALL
    if isinstance(value, str):
        return frozenset([value])
    values = frozenset(value)
    if ALL in values:
        return ALL
    return values


@dataclass(frozen=True)
class FilterSpec:
    """Product, retailer, and date-window constraints defining a queried subset.

    ``products`` / ``retailers`` are either the sentinel ``"all"`` or a set of
    exact values. Instances are immutable so a primary and a comparison filter
    can never share state.
    """
    products: Selection = ALL
    retailers: Selection = ALL
    date_window: DateWindow = field(default_factory=DateWindow.all_time)

    def __post_init__(self) -> None:
        object.__setattr__(self, "products", as_selection(self.products))
        object.__setattr__(self, "retailers", as_selection(self.retailers))
        if not isinstance(self.date_window, DateWindow):
            raise InvalidFilterSpec(f"date_window must be a DateWindow, got {type(self.date_window).__name__}")

    @property
    def label(self) -> str:
        return self.date_window.label

    def previous_window(self) -> "FilterSpec":
        """Same product/retailer selection over the preceding date window."""
        return FilterSpec(self.products, self.retailers, self.date_window.previous())

    def with_window(self, window: DateWindow) -> "FilterSpec":
        return FilterSpec(self.products, self.retailers, window)


def toggle_selection(current: Selection, value: str) -> Selection:
    """Toggle one value in a selection, honouring the ``"all"`` sentinel.

    Picking ``"all"`` resets the selection; picking a value while ``"all"`` is
    active selects just that value; deselecting the last value falls back to
    ``"all"``.
    """
    if value == ALL:
        return ALL
    if current == ALL:
        return frozenset([value])
    if value in current:
        remaining = frozenset(current) - {value}
        return remaining if remaining else ALL
    return frozenset(current) | {value}
