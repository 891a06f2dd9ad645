"""Classification of single config lines."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from sshconfman.errors import MalformedSectionError


class LineKind(str, Enum):
    """What a trimmed config line is."""

    BLANK = "blank"
    COMMENT = "comment"
    DIRECTIVE = "directive"
    UNKNOWN = "unknown"


class Directive(str, Enum):
    """Keywords parsed into Host record fields."""

    HOST = "Host"
    HOST_NAME = "HostName"
    PORT = "Port"
    USER = "User"
    IDENTITY_FILE = "IdentityFile"


# Lower-cased keyword, including the separating space, to directive
_PREFIXES: dict[str, Directive] = {f"{d.value.lower()} ": d for d in Directive}


@dataclass(frozen=True)
class ClassifiedLine:
    """A trimmed line and what it was recognized as."""

    kind: LineKind
    text: str
    directive: Directive | None = None
    value: str | None = None


def classify_line(line: str) -> ClassifiedLine:
    """Classify one line as blank, comment, a known directive or unknown text.

    The keyword must be followed by a space, so ``HostNameX foo`` is unknown.
    """
    text = line.strip()
    if not text:
        return ClassifiedLine(kind=LineKind.BLANK, text=text)

    keyword, sep, rest = text.partition(" ")
    directive = _PREFIXES.get(keyword.lower() + sep)
    if directive is not None:
        return ClassifiedLine(
            kind=LineKind.DIRECTIVE,
            text=text,
            directive=directive,
            value=rest.strip(),
        )

    if text.startswith("#"):
        return ClassifiedLine(kind=LineKind.COMMENT, text=text)

    return ClassifiedLine(kind=LineKind.UNKNOWN, text=text)


def iter_lines(block: bytes, encoding: str = "utf-8") -> Iterator[str]:
    """Decode a block and yield its lines without line terminators."""
    for line_number, raw in enumerate(block.splitlines(), start=1):
        try:
            yield raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise MalformedSectionError(
                "Cannot decode line",
                context={"line_number": line_number, "encoding": encoding},
                original_error=e,
            ) from e
