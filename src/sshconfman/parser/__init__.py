"""SSH config parsing module."""

from sshconfman.parser.lines import ClassifiedLine, Directive, LineKind, classify_line, iter_lines
from sshconfman.parser.record import HostRecord, build_host_record, parse_host_section
from sshconfman.parser.splitter import HOST_MARKER, iter_host_sections, split_host_sections

__all__ = [
    "HOST_MARKER",
    "ClassifiedLine",
    "Directive",
    "HostRecord",
    "LineKind",
    "build_host_record",
    "classify_line",
    "iter_host_sections",
    "iter_lines",
    "parse_host_section",
    "split_host_sections",
]
