"""In-memory SSH config document: read, query, mutate, serialize."""

import logging
from collections import Counter
from pathlib import Path
from typing import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from sshconfman.config import ManagerConfig
from sshconfman.errors import MalformedSectionError, SourceUnavailableError, StaleRecordError
from sshconfman.hashing import HashingReader, hash_bytes
from sshconfman.parser.record import HostRecord, parse_host_section
from sshconfman.parser.splitter import iter_host_sections
from sshconfman.types import ExportedConfig, ExportedHost

logger = logging.getLogger(__name__)


class ConfigDocument:
    """Ordered Host records plus the version of the file they were read from.

    file_version is fixed at read time. Mutating records does not change it:
    it is the token the writer compares against the file on disk.
    """

    def __init__(
        self,
        records: Iterable[HostRecord],
        file_version: str,
        source_path: Path | None = None,
    ):
        self.records: list[HostRecord] = list(records)
        self.file_version = file_version
        self.source_path = source_path

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __repr__(self) -> str:
        return f"ConfigDocument(hosts={len(self.records)}, file_version={self.file_version[:12]})"

    # Queries

    def host_names(self) -> list[str]:
        return [record.name for record in self.records]

    def find(self, name: str) -> HostRecord | None:
        """First record with the given name, as ssh itself resolves duplicates."""
        for record in self.records:
            if record.name == name:
                return record
        return None

    def get(self, identity: str) -> HostRecord:
        """Get the record currently carrying identity."""
        return self.records[self._index_of(identity)]

    def export(self) -> list[ExportedHost]:
        return [record.export() for record in self.records]

    def export_config(self) -> ExportedConfig:
        return ExportedConfig(file_version=self.file_version, hosts=self.export())

    def export_json(self, indent: int | None = 2) -> str:
        return self.export_config().model_dump_json(indent=indent)

    # Mutations

    def add(self, record: HostRecord) -> None:
        """Append a record at the end of the file."""
        self.records.append(record)

    def replace(self, identity: str, record: HostRecord) -> HostRecord:
        """
        Replace the record whose identity matches, keeping its position.

        Args:
            identity: Identity of the record as the caller last saw it
            record: Updated record

        Returns:
            The record that was replaced

        Raises:
            StaleRecordError: If no record carries identity any more
        """
        index = self._index_of(identity)
        previous = self.records[index]
        self.records[index] = record
        return previous

    def remove(self, identity: str) -> HostRecord:
        """Remove the record carrying identity and return it."""
        return self.records.pop(self._index_of(identity))

    def _index_of(self, identity: str) -> int:
        for index, record in enumerate(self.records):
            if record.identity == identity:
                return index
        raise StaleRecordError(
            "No host record with this identity; it was changed or removed",
            context={"identity": identity},
        )

    # Output

    def serialize(self, indent: str = "  ") -> str:
        """Render the canonical config text. Comments are not reproduced."""
        if not self.records:
            return ""
        return "\n\n".join(record.render(indent) for record in self.records) + "\n"

    def print(self, console: Console | None = None, indent: str = "  ") -> None:
        """Print every record as a panel titled with the host name."""
        console = console or Console()
        for record in self.records:
            console.print(Panel(
                Text(record.render(indent)),
                title=Text(record.name),
                subtitle=record.identity[:12],
                expand=False,
            ))


def parse_config(data: bytes, encoding: str = "utf-8") -> ConfigDocument:
    """Parse fully buffered config bytes into a document."""
    document = ConfigDocument(_parse_sections(iter_host_sections([data]), encoding), hash_bytes(data))
    _warn_duplicates(document)
    return document


def read_config(settings: ManagerConfig) -> ConfigDocument:
    """
    Read and parse the config file in a single pass.

    The file's bytes feed the splitter and the version hash at the same
    time, so the content is never read twice.

    Raises:
        SourceUnavailableError: If the file cannot be opened or read
        MalformedSectionError: If a Host block cannot be parsed
    """
    path = settings.config_path
    try:
        with open(path, "rb") as f:
            reader = HashingReader(f, settings.chunk_size)
            records = _parse_sections(iter_host_sections(reader), settings.encoding)
            file_version = reader.hexdigest()
    except OSError as e:
        raise SourceUnavailableError(
            "Cannot read SSH config",
            context={"path": path},
            original_error=e,
        ) from e

    logger.debug(f"Read {len(records)} host(s) from {path} (version {file_version[:12]})")
    document = ConfigDocument(records, file_version, source_path=path)
    _warn_duplicates(document)
    return document


def _parse_sections(sections: Iterable[bytes], encoding: str) -> list[HostRecord]:
    records = []
    for index, section in enumerate(sections):
        try:
            records.append(parse_host_section(section, encoding))
        except MalformedSectionError as e:
            e.context.setdefault("section", index)
            raise
    return records


def _warn_duplicates(document: ConfigDocument) -> None:
    counts = Counter(document.host_names())
    for name, count in counts.items():
        if count > 1:
            logger.warning(f"Host '{name}' is defined {count} times; ssh uses the first")
