"""Unit tests for context merging."""

import io

from psllm.context import augment_prompt, merge_context, read_piped_input, render_item


class TestMergeContext:
    def test_nothing_to_merge(self):
        assert merge_context() == ""
        assert merge_context(None, None) == ""
        assert merge_context(["", "   "], "\n") == ""

    def test_explicit_before_piped(self):
        merged = merge_context(["first", "second"], "piped text\n")
        assert merged == "first\nsecond\npiped text"

    def test_structured_objects_rendered_as_json(self):
        merged = merge_context({"name": "api", "port": 8080})
        assert '"name": "api"' in merged
        assert '"port": 8080' in merged

    def test_list_of_records_is_one_document(self):
        merged = merge_context(piped=[{"pid": 1}, {"pid": 2}])
        assert merged.startswith("[")
        assert '"pid": 2' in merged

    def test_bytes_are_decoded(self):
        assert merge_context(b"caf\xc3\xa9 \xff") == "caf\u00e9 \ufffd"

    def test_other_objects_use_str(self):
        class Process:
            def __str__(self):
                return "python (pid 42)"

        assert merge_context([Process()]) == "python (pid 42)"
        assert render_item(3.5) == "3.5"


class TestAugmentPrompt:
    def test_without_context(self):
        assert augment_prompt("  list files ", "") == "list files"

    def test_with_context(self):
        prompt = augment_prompt("explain this error", "permission denied")
        assert prompt == "explain this error\n\nContext:\npermission denied"


class TestReadPipedInput:
    def test_reads_non_tty_stream(self):
        assert read_piped_input(io.StringIO("line one\nline two\n")) == "line one\nline two\n"

    def test_empty_stream(self):
        assert read_piped_input(io.StringIO("  \n")) is None

    def test_tty_is_ignored(self):
        class FakeTTY(io.StringIO):
            def isatty(self):
                return True

        assert read_piped_input(FakeTTY("typed")) is None
        assert read_piped_input(None) is None
