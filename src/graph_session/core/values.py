"""Wire value codec.

Converts plain Python values into the tagged ``WireValue`` union the graph
service accepts as query parameters, and decodes result cells back into
Python values.

Conversion rules, in dispatch order:

- ``bool`` before ``int`` (``bool`` subclasses ``int``)
- ``int`` must fit a signed 64-bit integer
- ``float`` with no fractional part collapses to INT so integer-typed
  comparisons on the server keep matching; other floats stay FLOAT
- ``str`` is sent as UTF-8 bytes, ``bytes`` as-is
- ``None`` is NULL
- ``list``/``tuple`` and ``dict`` (str keys) convert recursively; the first
  failing element aborts the whole container
- ``WireValue`` and the temporal/geography models pass through unchanged
"""

from __future__ import annotations

import datetime as dt
import math
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, model_validator

from graph_session.core.exceptions import ConversionError

if TYPE_CHECKING:
    from graph_session.core.models import TimezoneInfo

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Date(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    day: int


class Time(BaseModel):
    """Time of day, in UTC as stored by the server."""

    model_config = ConfigDict(frozen=True)

    hour: int
    minute: int
    sec: int
    microsec: int = 0


class DateTime(BaseModel):
    """Date and time, in UTC as stored by the server."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    sec: int = 0
    microsec: int = 0


class Duration(BaseModel):
    model_config = ConfigDict(frozen=True)

    seconds: int = 0
    microseconds: int = 0
    months: int = 0


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    coord: Coordinate


class LineString(BaseModel):
    model_config = ConfigDict(frozen=True)

    coord_list: list[Coordinate]


class Polygon(BaseModel):
    model_config = ConfigDict(frozen=True)

    coord_list_list: list[list[Coordinate]]


class Geography(BaseModel):
    """One of point, line string or polygon."""

    model_config = ConfigDict(frozen=True)

    pt_val: Point | None = None
    ls_val: LineString | None = None
    pg_val: Polygon | None = None

    @model_validator(mode="after")
    def check_single_shape(self) -> Geography:
        shapes = (self.pt_val, self.ls_val, self.pg_val)
        populated = [v for v in shapes if v is not None]
        if len(populated) != 1:
            msg = f"Geography must hold exactly one shape, got {len(populated)}"
            raise ValueError(msg)
        return self


class ValueKind(StrEnum):
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    NULL = "null"
    LIST = "list"
    MAP = "map"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    DURATION = "duration"
    GEOGRAPHY = "geography"


_MODEL_KINDS: dict[ValueKind, type[BaseModel]] = {
    ValueKind.DATE: Date,
    ValueKind.DATETIME: DateTime,
    ValueKind.TIME: Time,
    ValueKind.DURATION: Duration,
    ValueKind.GEOGRAPHY: Geography,
}


class WireValue(BaseModel):
    """A single tagged value: ``kind`` names the one populated variant."""

    model_config = ConfigDict(frozen=True)

    kind: ValueKind
    value: Any = None

    @model_validator(mode="after")
    def check_variant(self) -> WireValue:
        if not _matches_kind(self.kind, self.value):
            msg = f"{type(self.value).__name__} is not a valid {self.kind} value"
            raise ValueError(msg)
        return self


def _matches_kind(kind: ValueKind, value: Any) -> bool:
    if kind is ValueKind.BOOL:
        return isinstance(value, bool)
    if kind is ValueKind.INT:
        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and INT64_MIN <= value <= INT64_MAX
        )
    if kind is ValueKind.FLOAT:
        return isinstance(value, float)
    if kind is ValueKind.STRING:
        return isinstance(value, bytes)
    if kind is ValueKind.NULL:
        return value is None
    if kind is ValueKind.LIST:
        return isinstance(value, list) and all(isinstance(v, WireValue) for v in value)
    if kind is ValueKind.MAP:
        return isinstance(value, dict) and all(
            isinstance(k, str) and isinstance(v, WireValue) for k, v in value.items()
        )
    return isinstance(value, _MODEL_KINDS[kind])


def _from_bool(value: bool) -> WireValue:
    return WireValue(kind=ValueKind.BOOL, value=value)


def _from_int(value: int) -> WireValue:
    if not INT64_MIN <= value <= INT64_MAX:
        msg = f"Integer {value} does not fit in a signed 64-bit wire value"
        raise ConversionError(msg)
    return WireValue(kind=ValueKind.INT, value=int(value))


def _from_float(value: float) -> WireValue:
    if math.isfinite(value) and value.is_integer() and INT64_MIN <= value <= INT64_MAX:
        return WireValue(kind=ValueKind.INT, value=int(value))
    return WireValue(kind=ValueKind.FLOAT, value=float(value))


def _from_str(value: str) -> WireValue:
    return WireValue(kind=ValueKind.STRING, value=value.encode("utf-8"))


def _from_bytes(value: bytes) -> WireValue:
    return WireValue(kind=ValueKind.STRING, value=bytes(value))


def _from_none(value: None) -> WireValue:
    return WireValue(kind=ValueKind.NULL)


def _from_list(value: list[Any] | tuple[Any, ...]) -> WireValue:
    return WireValue(kind=ValueKind.LIST, value=[convert(item) for item in value])


def _from_map(value: dict[Any, Any]) -> WireValue:
    return WireValue(kind=ValueKind.MAP, value=convert_params(value))


def _passthrough(kind: ValueKind) -> Callable[[Any], WireValue]:
    def wrap(value: Any) -> WireValue:
        return WireValue(kind=kind, value=value)

    return wrap


# Order matters: bool must be checked before int.
_CONVERTERS: tuple[tuple[type | tuple[type, ...], Callable[[Any], WireValue]], ...] = (
    (bool, _from_bool),
    (int, _from_int),
    (float, _from_float),
    (str, _from_str),
    (bytes, _from_bytes),
    (type(None), _from_none),
    ((list, tuple), _from_list),
    (dict, _from_map),
    (WireValue, lambda v: v),
    (Date, _passthrough(ValueKind.DATE)),
    (DateTime, _passthrough(ValueKind.DATETIME)),
    (Time, _passthrough(ValueKind.TIME)),
    (Duration, _passthrough(ValueKind.DURATION)),
    (Geography, _passthrough(ValueKind.GEOGRAPHY)),
)


def convert(value: Any) -> WireValue:
    """Convert a Python value into a WireValue.

    Raises ConversionError for types with no wire representation.
    """
    for host_type, converter in _CONVERTERS:
        if isinstance(value, host_type):
            return converter(value)
    msg = (
        "Only bool/int/float/str/bytes/None/list/dict and wire temporal or "
        f"geography values can be converted, got {type(value).__name__}"
    )
    raise ConversionError(msg)


def convert_params(params: Mapping[Any, Any] | None) -> dict[str, WireValue]:
    """Convert a parameter mapping; keys must be strings."""
    converted: dict[str, WireValue] = {}
    if not params:
        return converted
    for key, value in params.items():
        if not isinstance(key, str):
            msg = f"Parameter names must be str, got {type(key).__name__}"
            raise ConversionError(msg)
        converted[key] = convert(value)
    return converted


def to_python(value: WireValue, timezone: TimezoneInfo | None = None) -> Any:
    """Decode a result cell into a Python value.

    DateTime and Time cells are UTC on the wire and are shifted into the
    session timezone when one is given.
    """
    kind = value.kind
    if kind is ValueKind.STRING:
        return value.value.decode("utf-8", errors="replace")
    if kind is ValueKind.LIST:
        return [to_python(v, timezone) for v in value.value]
    if kind is ValueKind.MAP:
        return {k: to_python(v, timezone) for k, v in value.value.items()}
    if kind is ValueKind.DATE:
        d = value.value
        return dt.date(d.year, d.month, d.day)
    if kind is ValueKind.DATETIME:
        return _local_datetime(value.value, timezone)
    if kind is ValueKind.TIME:
        return _local_time(value.value, timezone)
    return value.value


def _tzinfo(timezone: TimezoneInfo | None) -> dt.tzinfo:
    if timezone is None:
        return dt.UTC
    offset = dt.timedelta(seconds=timezone.offset)
    if timezone.name:
        return dt.timezone(offset, timezone.name)
    return dt.timezone(offset)


def _local_datetime(value: DateTime, timezone: TimezoneInfo | None) -> dt.datetime:
    utc = dt.datetime(
        value.year,
        value.month,
        value.day,
        value.hour,
        value.minute,
        value.sec,
        value.microsec,
        tzinfo=dt.UTC,
    )
    return utc.astimezone(_tzinfo(timezone))


def _local_time(value: Time, timezone: TimezoneInfo | None) -> dt.time:
    offset = timezone.offset if timezone is not None else 0
    total = (value.hour * 3600 + value.minute * 60 + value.sec + offset) % 86400
    return dt.time(
        total // 3600,
        (total % 3600) // 60,
        total % 60,
        value.microsec,
        tzinfo=_tzinfo(timezone),
    )
