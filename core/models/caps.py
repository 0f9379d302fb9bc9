"""Capability (caps) descriptions for video sources.

Caps describe the media formats a source can produce. They are written as a
list of structures separated by ``;``, each structure being a media type
followed by optional ``key=value`` fields:

    video/x-raw-yuv, width=640, height=480; video/x-raw-rgb, format={ RGB, BGR }

Field values can be scalars, lists (``{ a, b }``) or integer ranges
(``[ 1, 30 ]``). A ``(type)`` prefix such as ``(int)640`` is accepted and ignored.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union


class CapsParseError(ValueError):
    """Exception raised when a caps string cannot be parsed."""
    pass


@dataclass(frozen=True)
class IntRange:
    """Inclusive integer range field value."""
    low: int
    high: int

    def __contains__(self, value: Any) -> bool:
        return isinstance(value, int) and self.low <= value <= self.high

    def __str__(self) -> str:
        return f"[ {self.low}, {self.high} ]"


def _values_intersect(a: Any, b: Any) -> bool:
    """Check whether two field values have at least one value in common."""
    if isinstance(a, IntRange) and isinstance(b, IntRange):
        return a.low <= b.high and b.low <= a.high
    if isinstance(a, tuple) and isinstance(b, tuple):
        return any(_values_intersect(x, b) for x in a)
    if isinstance(a, tuple):
        return any(_values_intersect(x, b) for x in a)
    if isinstance(b, tuple):
        return any(_values_intersect(a, y) for y in b)
    if isinstance(a, IntRange):
        return b in a
    if isinstance(b, IntRange):
        return a in b
    return a == b


def _format_value(value: Any) -> str:
    if isinstance(value, tuple):
        return "{ " + ", ".join(_format_value(v) for v in value) + " }"
    return str(value)


@dataclass(frozen=True)
class Structure:
    """A single media type with its fields.

    Attributes:
        media_type: Media type name, e.g. "video/x-raw-rgb"
        fields: Field name/value pairs in declaration order
    """
    media_type: str
    fields: Tuple[Tuple[str, Any], ...] = ()

    def get(self, key: str, default: Any = None) -> Any:
        for name, value in self.fields:
            if name == key:
                return value
        return default

    def can_intersect(self, other: "Structure") -> bool:
        """Check compatibility with another structure.

        Structures intersect when their media types are equal and every
        field present in both has at least one common value.
        """
        if self.media_type != other.media_type:
            return False
        theirs = dict(other.fields)
        for name, value in self.fields:
            if name in theirs and not _values_intersect(value, theirs[name]):
                return False
        return True

    def __str__(self) -> str:
        parts = [self.media_type]
        parts.extend(f"{name}={_format_value(value)}" for name, value in self.fields)
        return ", ".join(parts)


def _split_outside_brackets(text: str, separator: str) -> List[str]:
    parts = []
    depth = 0
    current = []
    for char in text:
        if char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth < 0:
                raise CapsParseError(f"Unbalanced brackets in caps: {text!r}")
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise CapsParseError(f"Unbalanced brackets in caps: {text!r}")
    parts.append("".join(current))
    return parts


def _parse_scalar(text: str) -> Any:
    text = text.strip()
    if text.startswith("(") and ")" in text:
        text = text[text.index(")") + 1:].strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    try:
        return int(text)
    except ValueError:
        pass
    if text.lower() in ("true", "false"):
        return text.lower() == "true"
    if not text:
        raise CapsParseError("Empty field value")
    return text


def _parse_value(text: str) -> Any:
    text = text.strip()
    if text.startswith("(") and ")" in text:
        text = text[text.index(")") + 1:].strip()
    if text.startswith("{"):
        if not text.endswith("}"):
            raise CapsParseError(f"Unterminated list: {text!r}")
        items = [item for item in _split_outside_brackets(text[1:-1], ",") if item.strip()]
        return tuple(_parse_scalar(item) for item in items)
    if text.startswith("["):
        if not text.endswith("]"):
            raise CapsParseError(f"Unterminated range: {text!r}")
        bounds = [_parse_scalar(item) for item in text[1:-1].split(",")]
        if len(bounds) != 2 or not all(isinstance(b, int) for b in bounds):
            raise CapsParseError(f"Only integer ranges are supported: {text!r}")
        return IntRange(min(bounds), max(bounds))
    return _parse_scalar(text)


def _parse_structure(text: str) -> Structure:
    parts = _split_outside_brackets(text, ",")
    media_type = parts[0].strip()
    if not media_type or "=" in media_type:
        raise CapsParseError(f"Missing media type in structure: {text!r}")

    fields = []
    for part in parts[1:]:
        if "=" not in part:
            raise CapsParseError(f"Field without value in structure: {part.strip()!r}")
        name, value = part.split("=", 1)
        name = name.strip()
        if not name:
            raise CapsParseError(f"Field without name in structure: {text!r}")
        fields.append((name, _parse_value(value)))
    return Structure(media_type, tuple(fields))


class Caps:
    """An ordered set of structures, or the special ANY/EMPTY caps.

    Example:
        raw = Caps.from_string("video/x-raw-yuv; video/x-raw-rgb")
        raw.can_intersect(Caps.from_string("video/x-raw-rgb, width=640"))  # True
    """

    def __init__(self, structures: Iterable[Structure] = (), any_caps: bool = False):
        self._structures: Tuple[Structure, ...] = () if any_caps else tuple(structures)
        self._any = any_caps

    @classmethod
    def any(cls) -> "Caps":
        return cls(any_caps=True)

    @classmethod
    def empty(cls) -> "Caps":
        return cls()

    @classmethod
    def from_string(cls, text: str) -> "Caps":
        """Parse a caps string.

        Args:
            text: Caps description, "ANY" or "EMPTY"

        Returns:
            Parsed Caps

        Raises:
            CapsParseError: If the string is malformed
        """
        text = text.strip()
        if text.upper() == "ANY":
            return cls.any()
        if not text or text.upper() == "EMPTY":
            return cls.empty()
        chunks = [chunk for chunk in _split_outside_brackets(text, ";") if chunk.strip()]
        return cls(_parse_structure(chunk) for chunk in chunks)

    @classmethod
    def from_value(cls, value: Union["Caps", str, Iterable[str], None]) -> Optional["Caps"]:
        """Coerce a config or property value to Caps.

        Accepts Caps, a caps string, a list of structure strings, or None.
        """
        if value is None or isinstance(value, Caps):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        return cls.from_string("; ".join(str(item) for item in value))

    @property
    def is_any(self) -> bool:
        return self._any

    @property
    def is_empty(self) -> bool:
        return not self._any and not self._structures

    @property
    def media_types(self) -> List[str]:
        return [s.media_type for s in self._structures]

    def can_intersect(self, other: "Caps") -> bool:
        """Check whether these caps share at least one format with other."""
        if self.is_empty or other.is_empty:
            return False
        if self._any or other.is_any:
            return True
        return any(mine.can_intersect(theirs) for mine in self._structures for theirs in other)

    def __iter__(self) -> Iterator[Structure]:
        return iter(self._structures)

    def __len__(self) -> int:
        return len(self._structures)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Caps):
            return NotImplemented
        return self._any == other._any and self._structures == other._structures

    def __hash__(self) -> int:
        return hash((self._any, self._structures))

    def __str__(self) -> str:
        if self._any:
            return "ANY"
        if not self._structures:
            return "EMPTY"
        return "; ".join(str(s) for s in self._structures)

    def __repr__(self) -> str:
        return f"Caps({str(self)!r})"


RAW_VIDEO_CAPS = "video/x-raw-yuv; video/x-raw-rgb"
