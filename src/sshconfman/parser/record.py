"""Host record construction from classified lines."""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable

from sshconfman.errors import MalformedSectionError
from sshconfman.hashing import hash_fields
from sshconfman.parser.lines import ClassifiedLine, Directive, LineKind, classify_line, iter_lines
from sshconfman.parser.splitter import HOST_MARKER
from sshconfman.types import ExportedHost

logger = logging.getLogger(__name__)

# Directive to HostRecord attribute, in serialization and hashing order
FIELD_DIRECTIVES: dict[Directive, str] = {
    Directive.HOST_NAME: "host_name",
    Directive.PORT: "port",
    Directive.USER: "user",
    Directive.IDENTITY_FILE: "identity_file",
}


@dataclass(frozen=True)
class HostRecord:
    """One Host block: the parsed fields plus every other directive, in order.

    other_lines holds trimmed lines that are not blank, comments or one of
    the parsed directives. Their order is kept since SSH applies directives
    in file order.

    Every value must read back unchanged once rendered: a single non-empty
    line without surrounding whitespace that does not contain the Host
    marker. Construction raises ValueError otherwise.
    """

    name: str
    host_name: str | None = None
    port: str | None = None
    user: str | None = None
    identity_file: str | None = None
    other_lines: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "other_lines", tuple(self.other_lines))

        _check_value("name", self.name)
        for attr in FIELD_DIRECTIVES.values():
            value = getattr(self, attr)
            if value is not None:
                _check_value(attr, value)

        for line in self.other_lines:
            _check_value("other_lines", line)
            kind = classify_line(line).kind
            if kind != LineKind.UNKNOWN:
                raise ValueError(f"other_lines entry {line!r} would be read back as a {kind.value} line")

    @property
    def identity(self) -> str:
        """Content hash used as the record's version stamp."""
        parts = [self.name]
        parts.extend(
            value for attr in FIELD_DIRECTIVES.values()
            if (value := getattr(self, attr)) is not None
        )
        parts.extend(self.other_lines)
        return hash_fields(part.encode("utf-8") for part in parts)

    def with_changes(self, **changes) -> "HostRecord":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def render(self, indent: str = "  ") -> str:
        """Render the record as a Host block, without a trailing newline."""
        parts = [f"{Directive.HOST.value} {self.name}"]
        for directive, attr in FIELD_DIRECTIVES.items():
            value = getattr(self, attr)
            if value is not None:
                parts.append(f"{indent}{directive.value} {value}")
        parts.extend(f"{indent}{line}" for line in self.other_lines)
        return "\n".join(parts)

    def export(self) -> ExportedHost:
        return ExportedHost(
            id=self.identity,
            name=self.name,
            host_name=self.host_name or "",
            port=self.port or "",
            user=self.user or "",
            identity_file=self.identity_file or "",
            other_lines=list(self.other_lines),
        )


def _check_value(field: str, value: str) -> None:
    if not value:
        raise ValueError(f"{field} must not be empty")
    if "\r" in value or "\n" in value:
        raise ValueError(f"{field} must be a single line: {value!r}")
    if value != value.strip():
        raise ValueError(f"{field} must not have surrounding whitespace: {value!r}")
    if HOST_MARKER in value.encode("utf-8").lower():
        raise ValueError(f"{field} must not contain {HOST_MARKER.decode()!r}: {value!r}")


def build_host_record(lines: Iterable[ClassifiedLine]) -> HostRecord:
    """
    Fold classified lines into a HostRecord.

    Parsed fields are last-write-wins, including a repeated Host line inside
    one block. Blank lines and comments are dropped.

    Raises:
        MalformedSectionError: If no non-empty Host name was found, or a
            value would not read back unchanged
    """
    name: str | None = None
    fields: dict[str, str] = {}
    other_lines: list[str] = []

    for line in lines:
        if line.kind == LineKind.DIRECTIVE:
            if line.directive == Directive.HOST:
                if name is not None:
                    logger.warning(f"Host block '{name}' has another Host line '{line.value}', keeping the last")
                name = line.value
            else:
                fields[FIELD_DIRECTIVES[line.directive]] = line.value
        elif line.kind == LineKind.UNKNOWN:
            other_lines.append(line.text)

    if not name:
        raise MalformedSectionError("Host block has no name")

    try:
        return HostRecord(name=name, other_lines=tuple(other_lines), **fields)
    except ValueError as e:
        raise MalformedSectionError(str(e), context={"host": name}, original_error=e) from e


def parse_host_section(block: bytes, encoding: str = "utf-8") -> HostRecord:
    """Parse the bytes of one Host block into a HostRecord."""
    return build_host_record(classify_line(line) for line in iter_lines(block, encoding))
