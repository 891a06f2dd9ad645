"""Tests for Host block splitting."""

from sshconfman.parser.splitter import iter_host_sections, split_host_sections


class TestSplitHostSections:
    def test_empty_input(self):
        assert split_host_sections(b"") == []

    def test_no_marker(self):
        assert split_host_sections(b"User root\nPort 22\n") == []

    def test_leading_text_dropped(self):
        data = b"# global\nForwardAgent yes\nHost a\n  Port 1\n"
        assert split_host_sections(data) == [b"Host a\n  Port 1\n"]

    def test_marker_at_start(self):
        assert split_host_sections(b"Host a\n") == [b"Host a\n"]

    def test_last_block_runs_to_end(self):
        data = b"Host a\n  Port 1\nHost b\n  User root"
        assert split_host_sections(data) == [
            b"Host a\n  Port 1\n",
            b"Host b\n  User root",
        ]

    def test_marker_case_insensitive_content_verbatim(self):
        data = b"HOST Alpha\n  HostName A.example\nhost beta\n"
        assert split_host_sections(data) == [
            b"HOST Alpha\n  HostName A.example\n",
            b"host beta\n",
        ]

    def test_hostname_is_not_a_marker(self):
        data = b"Host a\n  HostName example.com\n"
        assert split_host_sections(data) == [data]


class TestIterHostSections:
    def test_one_byte_chunks(self):
        data = b"# lead\nHost a\n  HostName x\n\nhOsT b\n  Port 2\n"
        chunks = [data[i:i + 1] for i in range(len(data))]

        assert list(iter_host_sections(chunks)) == split_host_sections(data)

    def test_marker_split_across_chunks(self):
        chunks = [b"junk ho", b"st a\n  Port 1\nHo", b"st b\n"]

        assert list(iter_host_sections(chunks)) == [b"host a\n  Port 1\n", b"Host b\n"]

    def test_empty_chunks_ignored(self):
        assert list(iter_host_sections([b"", b"Host a\n", b""])) == [b"Host a\n"]

    def test_yields_before_stream_is_exhausted(self):
        chunks = iter([b"Host a\n", b"Host b\n", b"Host c\n"])
        sections = iter_host_sections(chunks)

        assert next(sections) == b"Host a\n"
        assert list(chunks) == [b"Host c\n"]
