"""Tests for the file-backed execution logger."""

from pathlib import Path

from hookscript.scripts.logger import FileLogger

EXPECTED_LOG = "Test1\nTest2\n"


class MirrorRecorder:
    """Collects mirrored chunks, one line each."""

    def __init__(self):
        self.chunks = []

    def __call__(self, text):
        self.chunks.append(text)

    @property
    def logged(self):
        return "".join(f"{chunk}\n" for chunk in self.chunks)


class TestNullOutputFile:
    """Tests for a logger without a backing file."""

    def test_no_mirror(self):
        """Should discard output without error."""
        with FileLogger(None) as logger:
            logger.consume_line("Test1")
            print("Test2", file=logger.stream)
            logger.stream.flush()

            assert logger.output_file is None

    def test_with_mirror(self):
        """Should still mirror output when discarding it."""
        mirror = MirrorRecorder()

        with FileLogger(None, mirror) as logger:
            logger.consume_line("Test1")
            print("Test2", file=logger.stream)
            logger.stream.flush()

            assert logger.output_file is None

        assert mirror.logged == EXPECTED_LOG

    def test_with_mirror_single_char(self):
        """A single character followed by a flush is mirrored as one line."""
        mirror = MirrorRecorder()

        with FileLogger(None, mirror) as logger:
            logger.stream.write("A")
            logger.stream.flush()

        assert mirror.chunks == ["A"]

    def test_separate_flushes(self):
        """Each flush delivers its own chunk."""
        mirror = MirrorRecorder()

        with FileLogger(None, mirror) as logger:
            logger.stream.write("A")
            logger.stream.flush()
            logger.stream.write("B\r\n")
            logger.stream.flush()

        assert mirror.chunks == ["A", "B"]

    def test_flush_without_writes(self):
        """An empty flush should not reach the mirror."""
        mirror = MirrorRecorder()

        with FileLogger(None, mirror) as logger:
            logger.stream.flush()
            logger.stream.flush()

        assert mirror.chunks == []

    def test_consume_output_object(self):
        """Should accept handler objects with consume_output."""

        class Handler:
            def __init__(self):
                self.seen = []

            def consume_output(self, text):
                self.seen.append(text)

        handler = Handler()
        with FileLogger(None, handler) as logger:
            logger.consume_line("hello")

        assert handler.seen == ["hello"]


class TestOutputFile:
    """Tests for a logger writing to a file."""

    def test_no_mirror(self, tmp_path):
        """Should write lines to the file."""
        output_file = tmp_path / "test.log"

        with FileLogger(output_file) as logger:
            logger.consume_line("Test1")
            print("Test2", file=logger.stream)
            logger.stream.flush()

            assert logger.output_file == output_file

        assert output_file.exists()
        assert output_file.read_text() == EXPECTED_LOG

    def test_with_mirror(self, tmp_path):
        """File content and mirrored output should agree."""
        output_file = tmp_path / "test.log"
        mirror = MirrorRecorder()

        with FileLogger(output_file, mirror) as logger:
            logger.consume_line("Test1")
            print("Test2", file=logger.stream)
            logger.stream.flush()

        assert mirror.logged == EXPECTED_LOG
        assert output_file.read_text() == EXPECTED_LOG

    def test_creates_parent_directories(self, tmp_path):
        """Missing parent directories should be created."""
        output_file = tmp_path / "target" / "logs" / "build.log"

        with FileLogger(output_file) as logger:
            logger.consume_line("hello")

        assert output_file.read_text() == "hello\n"

    def test_accepts_string_path(self, tmp_path):
        """Should accept a str path."""
        output_file = tmp_path / "build.log"

        with FileLogger(str(output_file)) as logger:
            assert logger.output_file == Path(output_file)

    def test_close_flushes_pending_output(self, tmp_path):
        """Unflushed writes should reach the file and the mirror on close."""
        output_file = tmp_path / "build.log"
        mirror = MirrorRecorder()

        logger = FileLogger(output_file, mirror)
        logger.stream.write("pending\n")
        logger.close()

        assert output_file.read_text() == "pending\n"
        assert mirror.chunks == ["pending"]

    def test_close_twice(self, tmp_path):
        """Closing more than once should be harmless."""
        logger = FileLogger(tmp_path / "build.log")
        logger.close()
        logger.close()

        assert logger.stream.closed

    def test_encoding(self, tmp_path):
        """Should write the file with the requested encoding."""
        output_file = tmp_path / "build.log"

        with FileLogger(output_file, encoding="utf-8") as logger:
            logger.consume_line("café")

        assert output_file.read_bytes().decode("utf-8") == "café\n"
