"""Exported type definitions for sshconfman."""

from pydantic import BaseModel


class ExportedHost(BaseModel):
    """Public view of a Host record.

    Kept separate from the internal record so the external shape stays
    stable if the parser's representation changes. Absent fields export
    as empty strings.
    """

    id: str
    name: str
    host_name: str = ""
    port: str = ""
    user: str = ""
    identity_file: str = ""
    other_lines: list[str] = []


class ExportedConfig(BaseModel):
    """Public view of a whole config document."""

    file_version: str
    hosts: list[ExportedHost] = []


class ResolvedHost(BaseModel):
    """Effective connection settings for an alias after SSH matching rules."""

    alias: str
    hostname: str
    user: str | None = None
    port: int = 22
    identity_file: str | None = None
