"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
JSON helpers for reading loosely structured qTest responses.

Two tiers are provided. ``parse`` and ``parse_json`` are strict and raise
``JsonParseError``. ``read_tree``, ``deserialize``, the field getters and
``serialize`` never raise: failures are logged and a default is returned.
"""

import json
import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

from dateutil import parser, tz
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from jtoq.core.exceptions import JsonParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_INTEGER = re.compile(r"[+-]?\d+")
_DATE_TIME = r"(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
_ZONE = r"(?P<zone>Z|[+-]\d{2}(?::?\d{2})?)"


def _fraction_pattern(digits: str) -> re.Pattern:
    return re.compile(rf"{_DATE_TIME}\.(?P<fraction>\d{{{digits}}}){_ZONE}")


# Tried in order; qTest endpoints differ in fractional-second precision.
TIMESTAMP_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("yyyy-MM-dd'T'HH:mm:ss.SSSSSSX", _fraction_pattern("6")),
    ("yyyy-MM-dd'T'HH:mm:ss.SSSX", _fraction_pattern("3")),
    ("yyyy-MM-dd'T'HH:mm:ss.SSSSX", _fraction_pattern("4")),
    ("yyyy-MM-dd'T'HH:mm:ss.SSSSSX", _fraction_pattern("5")),
    ("yyyy-MM-dd'T'HH:mm:ss.SSSSSSSX", _fraction_pattern("7")),
    ("yyyy-MM-dd'T'HH:mm:ss.SSSSSSSSX", _fraction_pattern("8")),
    ("yyyy-MM-dd'T'HH:mm:ss.SSSSSSSSSX", _fraction_pattern("9")),
    ("yyyy-MM-dd'T'HH:mm:ss.sX", _fraction_pattern("1,2")),
    ("yyyy-MM-dd'T'HH:mm:ssX", re.compile(rf"{_DATE_TIME}{_ZONE}")),
    ("yyyy-MM-dd'T'HH:mm:ss", re.compile(_DATE_TIME)),
]


def _as_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        return ""
    return str(value)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # NaN and Infinity are accepted by the parser
        try:
            return int(value)
        except (ValueError, OverflowError):
            return 0
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            return 0
    return 0


class JsonCodec:
    """
    JSON parser and serializer.

    Instances hold no per-call state and can be shared; each component that
    needs JSON handling is given its own instance or the one the caller owns.
    """

    def __init__(self, indent: int | None = None):
        """
        Args:
            indent: Indentation used by ``serialize``; compact output when None
        """
        self.indent = indent

    def new_node(self) -> dict[str, Any]:
        """Create an empty object node."""
        return {}

    def current_date_string(self) -> str:
        """Current local time with millisecond precision and numeric offset."""
        return datetime.now().astimezone().isoformat(timespec="milliseconds")

    def parse(self, text: str | None) -> Any:
        """
        Parse JSON text into a tree of dicts, lists and scalars.

        Returns:
            The parsed value, or None for empty or blank text

        Raises:
            JsonParseError: If the text is not valid JSON
        """
        if text is None or not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise JsonParseError(f"Invalid JSON: {e}") from e

    parse_tree = parse

    def read_tree(self, text: str | None) -> Any:
        """Parse JSON text, returning None instead of raising on invalid input."""
        try:
            return self.parse(text)
        except JsonParseError as e:
            logger.warning(f"read_tree: cannot read tree from body string: {e}")
            return None

    def get_text(self, node: Any, field: str) -> str:
        """Text of ``node[field]``; empty string when the node or field is missing."""
        if not isinstance(node, Mapping) or field not in node:
            return ""
        return _as_text(node[field])

    get_string = get_text

    def get_int(self, node: Any, field: str) -> int:
        """Integer value of ``node[field]``; 0 when missing or not numeric."""
        if not isinstance(node, Mapping) or field not in node:
            return 0
        return _as_int(node[field])

    def get_long(self, node: Any, field: str) -> int:
        """Same as ``get_int``; Python integers have no separate long type."""
        return self.get_int(node, field)

    def parse_json(self, text: str | None, target: type[T] | Any) -> T | None:
        """
        Deserialize JSON text into ``target``; unknown properties are ignored.

        Returns:
            An instance of ``target``, or None for empty text

        Raises:
            JsonParseError: If the text is malformed or does not fit ``target``
        """
        if text is None or not text.strip():
            return None
        try:
            return TypeAdapter(target).validate_json(text)
        except ValidationError as e:
            raise JsonParseError(f"Cannot map JSON to {target}: {e}") from e

    def deserialize(self, text: str | None, target: type[T] | Any) -> T | None:
        """Deserialize JSON text into ``target``, returning None on any failure."""
        try:
            return self.parse_json(text, target)
        except JsonParseError as e:
            logger.warning(f"Cannot map from JSON to {target}: {e}")
            return None

    from_json = deserialize

    def to_json_node(self, data: Any) -> dict[str, Any]:
        """
        Convert a model or mapping into an object node.

        Anything that does not convert to a JSON object yields an empty node.
        """
        if data is None:
            return self.new_node()
        try:
            node = to_jsonable_python(data, by_alias=True)
        except PydanticSerializationError:
            return self.new_node()
        if not isinstance(node, dict):
            return self.new_node()
        return node

    def serialize(self, data: Any, exclude_none: bool = False) -> str:
        """
        Serialize a value to JSON text.

        Pydantic models are written with their field aliases. Returns an empty
        string for None and when the value cannot be serialized.
        """
        if data is None:
            return ""
        try:
            if isinstance(data, BaseModel):
                return data.model_dump_json(by_alias=True, exclude_none=exclude_none, indent=self.indent)
            return json.dumps(
                to_jsonable_python(data, by_alias=True, exclude_none=exclude_none),
                indent=self.indent,
            )
        except (PydanticSerializationError, TypeError, ValueError) as e:
            logger.warning(f"Cannot serialize object of type {type(data).__name__} to JSON: {e}")
            return ""

    to_json = serialize

    def parse_timestamp(self, timestamp: str | None) -> datetime | None:
        """
        Parse a timestamp from a qTest or JUnit document.

        A positive integer is read as epoch milliseconds. Anything else is
        matched against ``TIMESTAMP_PATTERNS`` in order; a timestamp without a
        zone is taken as UTC.

        Returns:
            A timezone-aware datetime, or None if no format matched
        """
        if not timestamp:
            return None
        timestamp = timestamp.strip()

        if _INTEGER.fullmatch(timestamp):
            millis = int(timestamp)
            if millis > 0:
                try:
                    return _EPOCH + timedelta(milliseconds=millis)
                except OverflowError:
                    pass

        for name, pattern in TIMESTAMP_PATTERNS:
            match = pattern.fullmatch(timestamp)
            if match is None:
                logger.debug(f"Timestamp '{timestamp}' does not match format {name}")
                continue
            try:
                parsed = parser.isoparse(timestamp)
            except ValueError as e:
                logger.debug(f"Failed to parse timestamp '{timestamp}' with format {name}: {e}")
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=tz.UTC)
            return parsed

        logger.warning(f"Failed to parse timestamp '{timestamp}': no known format matched")
        return None
