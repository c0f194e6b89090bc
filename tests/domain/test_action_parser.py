"""Tests for domain/action_parser.py — pure Python, no network or filesystem."""

import pytest

from codeagent.domain.action_parser import (
    describe_action,
    parse_actions,
    parse_json_blocks,
    strip_actions,
)
from codeagent.domain.models import (
    CreateDirectory,
    CreateFile,
    ExecuteCommand,
    ModifyFile,
    ReadFile,
)


class TestTagBlocks:
    def test_create_file_then_command(self):
        text = (
            "Sure, here you go.\n"
            "<create_file><path>main.txt</path><content>hello</content></create_file>\n"
            "<execute_command><command>echo done</command></execute_command>"
        )
        actions = parse_actions(text)
        assert actions == [
            CreateFile(path="main.txt", content="hello"),
            ExecuteCommand(command="echo done", description=""),
        ]

    def test_fields_are_trimmed(self):
        text = (
            "<create_file>\n  <path> src/app.py </path>\n"
            "  <content>\nprint('hi')\n</content>\n</create_file>"
        )
        actions = parse_actions(text)
        assert actions == [CreateFile(path="src/app.py", content="print('hi')")]

    def test_multiline_content(self):
        text = "<create_file><path>a.py</path><content>line1\nline2\n</content></create_file>"
        (action,) = parse_actions(text)
        assert action.content == "line1\nline2"

    def test_command_with_description(self):
        text = (
            "<execute_command><command>ls -la</command>"
            "<description>list files</description></execute_command>"
        )
        assert parse_actions(text) == [
            ExecuteCommand(command="ls -la", description="list files")
        ]

    def test_create_directory(self):
        text = "<create_directory><path>pkg/sub</path></create_directory>"
        assert parse_actions(text) == [CreateDirectory(path="pkg/sub")]

    def test_modify_file(self):
        text = (
            "<modify_file><path>a.txt</path><search>old</search>"
            "<replace>new</replace></modify_file>"
        )
        assert parse_actions(text) == [ModifyFile(path="a.txt", search="old", replace="new")]

    def test_read_file(self):
        text = "<read_file><path>README.md</path></read_file>"
        assert parse_actions(text) == [ReadFile(path="README.md")]

    def test_order_is_grouped_by_kind(self):
        text = (
            "<read_file><path>r.txt</path></read_file>"
            "<execute_command><command>make</command></execute_command>"
            "<create_directory><path>d</path></create_directory>"
            "<create_file><path>one.txt</path><content>1</content></create_file>"
            "<create_file><path>two.txt</path><content>2</content></create_file>"
        )
        kinds = [type(a) for a in parse_actions(text)]
        assert kinds == [CreateFile, CreateFile, ExecuteCommand, CreateDirectory, ReadFile]
        paths = [a.path for a in parse_actions(text) if isinstance(a, CreateFile)]
        assert paths == ["one.txt", "two.txt"]

    def test_no_actions(self):
        assert parse_actions("just plain text, no markup") == []

    def test_unterminated_tag_is_ignored(self):
        text = "<create_file><path>a.txt</path><content>never closed"
        assert parse_actions(text) == []

    def test_directory_path_must_be_single_line(self):
        text = "<create_directory><path>a\nb</path></create_directory>"
        assert parse_actions(text) == []

    def test_parse_is_deterministic(self):
        text = (
            "<create_file><path>x</path><content>y</content></create_file>"
            "<read_file><path>x</path></read_file>"
        )
        assert parse_actions(text) == parse_actions(text)


class TestJsonBlocks:
    def test_files_list(self):
        text = 'Here:\n```json\n{"files":[{"name":"a.txt","content":"x"}]}\n```'
        assert parse_actions(text) == [CreateFile(path="a.txt", content="x")]

    def test_top_level_array_without_language(self):
        text = '```\n[{"path":"b.txt","body":"hi"}]\n```'
        assert parse_json_blocks(text) == [CreateFile(path="b.txt", content="hi")]

    def test_single_create_file_object(self):
        text = '```json\n{"create_file": {"path": "c.txt", "content": "data"}}\n```'
        assert parse_actions(text) == [CreateFile(path="c.txt", content="data")]

    def test_keys_are_case_insensitive(self):
        text = '```json\n{"Files": [{"path": "d.txt", "content": "z"}]}\n```'
        assert parse_actions(text) == [CreateFile(path="d.txt", content="z")]

    def test_content_is_not_trimmed(self):
        text = '```json\n{"files":[{"path":"e.txt","content":"  keep\\n"}]}\n```'
        (action,) = parse_actions(text)
        assert action.content == "  keep\n"

    def test_entries_missing_fields_are_skipped(self):
        text = (
            '```json\n{"files":[{"path":"ok.txt","content":"1"},'
            '{"path":"no-content.txt"},{"content":"no path"},'
            '{"path":"","content":"empty path"}]}\n```'
        )
        assert parse_actions(text) == [CreateFile(path="ok.txt", content="1")]

    def test_non_string_fields_are_skipped(self):
        text = '```json\n{"files":[{"path":1,"content":"x"}]}\n```'
        assert parse_actions(text) == []

    def test_malformed_json_is_ignored(self):
        text = '```json\n{"files": [oops]}\n```'
        assert parse_actions(text) == []

    def test_unrelated_json_is_ignored(self):
        text = '```json\n{"name": "config", "version": 2}\n```'
        assert parse_actions(text) == []

    def test_json_actions_come_before_tags(self):
        text = (
            "<create_file><path>tag.txt</path><content>t</content></create_file>\n"
            '```json\n{"files":[{"path":"json.txt","content":"j"}]}\n```'
        )
        paths = [a.path for a in parse_actions(text)]
        assert paths == ["json.txt", "tag.txt"]

    def test_plain_code_fence_is_not_an_action(self):
        text = "```python\nprint('example')\n```"
        assert parse_actions(text) == []


class TestStripActions:
    def test_strips_tags(self):
        text = "before <read_file><path>a</path></read_file> after"
        assert strip_actions(text) == "before  after"

    def test_no_actions(self):
        assert strip_actions("  plain  ") == "plain"


class TestDescribeAction:
    def test_create_file_counts_utf8_bytes(self):
        assert describe_action(CreateFile(path="a.txt", content="é")) == "CREATE_FILE: a.txt (2 bytes)"

    def test_command_without_description(self):
        assert describe_action(ExecuteCommand(command="ls")) == "EXECUTE_COMMAND: ls (no description)"

    def test_command_with_description(self):
        action = ExecuteCommand(command="ls", description="list")
        assert describe_action(action) == "EXECUTE_COMMAND: ls (list)"

    @pytest.mark.parametrize(
        "action, expected",
        [
            (CreateDirectory(path="d"), "CREATE_DIRECTORY: d"),
            (ModifyFile(path="m", search="a", replace="b"), "MODIFY_FILE: m"),
            (ReadFile(path="r"), "READ_FILE: r"),
        ],
    )
    def test_path_actions(self, action, expected):
        assert describe_action(action) == expected

    def test_unknown_type_raises(self):
        with pytest.raises(TypeError):
            describe_action("not an action")
