"""Tests for ax-schema: parser, validator, dependency checks."""
from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest
from ax_core.errors import DefinitionError, ParseError, ValidationError
from ax_schema.dependencies import check_dependencies
from ax_schema.parser import parse, parse_file
from ax_schema.types import AgentDefinition, AgentInfo, McpTool, Skill
from ax_schema.validator import AgentValidator, is_safe_name

if TYPE_CHECKING:
    from pathlib import Path


def _doc(text: str) -> bytes:
    return textwrap.dedent(text).encode("utf-8")


# ── Parser Tests ─────────────────────────────────────────────────────


class TestParse:
    def test_full_definition(self, github_helper_yaml: bytes) -> None:
        defn = parse(github_helper_yaml)
        assert defn.name == "gh-helper"
        assert defn.version == "0.2.0"
        assert defn.identity is not None
        assert defn.identity.system_prompt == "You manage GitHub issues."
        assert [s.name for s in defn.skills] == ["triage"]

        tool = defn.mcp[0]
        assert tool.command == "npx"
        assert tool.args == ("-y", "@modelcontextprotocol/server-github")
        assert dict(tool.env) == {"GITHUB_TOKEN": "${GITHUB_TOKEN}"}
        assert tool.setup_url == "https://github.com/settings/tokens"

    def test_minimal_definition(self) -> None:
        defn = parse(b"name: a\nversion: '1'\n")
        assert defn.identity is None
        assert defn.skills == ()
        assert defn.mcp == ()
        assert defn.description == ""

    def test_unknown_keys_ignored(self) -> None:
        defn = parse(_doc("""\
            name: a
            version: 1.0.0
            homepage: https://example.com
            skills:
              - name: s
                content: x
                tags: [one]
        """))
        assert defn.skills[0].name == "s"

    @pytest.mark.parametrize(("raw_version", "expected"), [
        (b"2", "2"),
        (b"1.10", "1.10"),
        (b"1e3", "1e3"),
        (b"0o17", "0o17"),
    ])
    def test_numeric_scalars_kept_as_written(self, raw_version: bytes, expected: str) -> None:
        assert parse(b"name: a\nversion: " + raw_version + b"\n").version == expected

    def test_numeric_name_kept_as_written(self) -> None:
        assert parse(b"name: 1e3\nversion: 1.0.0\n").name == "1e3"

    def test_numeric_env_value_kept_as_written(self) -> None:
        defn = parse(b"name: a\nversion: 1\nmcp:\n  - {name: g, command: c, env: {PORT: 08080}}\n")
        assert dict(defn.mcp[0].env) == {"PORT": "08080"}

    def test_skill_order_preserved(self) -> None:
        defn = parse(_doc("""\
            name: a
            version: 1.0.0
            skills:
              - {name: zeta, content: z}
              - {name: alpha, content: a}
              - {name: mid, content: m}
        """))
        assert [s.name for s in defn.skills] == ["zeta", "alpha", "mid"]

    def test_bom_is_stripped(self) -> None:
        defn = parse("\ufeffname: a\nversion: 1.0.0\n".encode())
        assert defn.name == "a"

    def test_parse_file(self, tmp_path: Path, code_cleaner_yaml: bytes) -> None:
        path = tmp_path / "agent.yaml"
        path.write_bytes(code_cleaner_yaml)
        assert parse_file(path).name == "code-cleaner"


class TestParseErrors:
    def test_invalid_yaml_is_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse(b"name: [unclosed\n")

    def test_non_utf8_is_parse_error(self) -> None:
        with pytest.raises(ParseError, match="UTF-8"):
            parse(b"name: \xff\xfe\n")

    def test_empty_document_is_parse_error(self) -> None:
        with pytest.raises(ParseError, match="empty document"):
            parse(b"")

    def test_scalar_document_is_parse_error(self) -> None:
        with pytest.raises(ParseError, match="mapping"):
            parse(b"just a string\n")

    def test_missing_name_is_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="name is required"):
            parse(b"version: 1.0.0\n")

    def test_missing_version_is_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="version is required"):
            parse(b"name: a\n")

    def test_identity_without_prompt(self) -> None:
        with pytest.raises(ValidationError, match="system_prompt"):
            parse(_doc("""\
                name: a
                version: 1.0.0
                identity:
                  model: opus
            """))

    def test_duplicate_skill_names(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate skill name: 'x'"):
            parse(_doc("""\
                name: a
                version: 1.0.0
                skills:
                  - {name: x, content: one}
                  - {name: x, content: two}
            """))

    def test_duplicate_mcp_names(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate MCP name: 'gh'"):
            parse(_doc("""\
                name: a
                version: 1.0.0
                mcp:
                  - {name: gh, command: npx}
                  - {name: gh, command: uvx}
            """))

    def test_mcp_without_command(self) -> None:
        with pytest.raises(ValidationError, match="has no command"):
            parse(b"name: a\nversion: 1.0.0\nmcp:\n  - name: gh\n")

    def test_skills_not_a_list(self) -> None:
        with pytest.raises(ValidationError, match="'skills' must be a list"):
            parse(b"name: a\nversion: 1.0.0\nskills: nope\n")

    def test_non_string_args(self) -> None:
        with pytest.raises(ValidationError, match="args"):
            parse(b"name: a\nversion: 1.0.0\nmcp:\n  - {name: g, command: c, args: [true]}\n")

    def test_non_string_env_value(self) -> None:
        with pytest.raises(ValidationError, match="env"):
            parse(b"name: a\nversion: 1.0.0\nmcp:\n  - {name: g, command: c, env: {K: true}}\n")

    @pytest.mark.parametrize("raw", [
        b"name: a\nversion: true\n",
        b"name: a\nversion: 2024-01-01\n",
        b"name: a\nversion: !!int 3\n",
        b"name: a\nversion: 1\nidentity: {system_prompt: hi, model: yes}\n",
    ])
    def test_non_text_scalar_rejected(self, raw: bytes) -> None:
        with pytest.raises(ValidationError, match="must be text"):
            parse(raw)

    def test_deep_nesting_is_parse_error(self) -> None:
        with pytest.raises(ParseError, match="nested too deeply"):
            parse(b"name: " + b"[" * 5000 + b"]" * 5000)

    def test_path_traversal_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Agent name"):
            parse(b"name: ../evil\nversion: 1.0.0\n")

    @pytest.mark.parametrize("raw", [
        b"",
        b"---\n",
        b"[1, 2]",
        b"name: {a: b}\nversion: 1\n",
        b"\x00\x01\x02",
        b"name: a\nversion: 1\nidentity: prompt\n",
        b"name: a\nversion: 1\nskills: [1]\n",
    ])
    def test_every_failure_is_a_definition_error(self, raw: bytes) -> None:
        with pytest.raises(DefinitionError):
            parse(raw)


# ── Validator Tests ──────────────────────────────────────────────────


class TestValidator:
    def test_valid_definition_has_no_errors(self) -> None:
        defn = AgentDefinition(name="a", version="1", skills=(Skill("s", "x"),))
        assert AgentValidator().validate(defn) == []

    def test_collects_every_error(self) -> None:
        defn = AgentDefinition(
            name="",
            version="",
            mcp=(McpTool(name="t", command=""),),
        )
        errors = AgentValidator().validate(defn)
        assert len(errors) == 3

    def test_validate_strict_joins_messages(self) -> None:
        defn = AgentDefinition(name="a", version="")
        with pytest.raises(ValidationError, match="'a' validation failed"):
            AgentValidator().validate_strict(defn)

    @pytest.mark.parametrize(("name", "ok"), [
        ("code-cleaner", True),
        ("v1.2_beta", True),
        ("", False),
        ("-leading", False),
        ("a/b", False),
        ("a..b", False),
        ("x" * 129, False),
    ])
    def test_is_safe_name(self, name: str, ok: bool) -> None:
        assert is_safe_name(name) is ok


# ── Types / Dependencies ─────────────────────────────────────────────


class TestTypes:
    def test_mcp_env_is_read_only(self, github_helper_yaml: bytes) -> None:
        tool = parse(github_helper_yaml).mcp[0]
        with pytest.raises(TypeError):
            tool.env["X"] = "y"  # type: ignore[index]

    def test_spec_is_plain_json_data(self) -> None:
        tool = McpTool(name="t", command="uvx", args=("srv",))
        assert tool.spec() == {"command": "uvx", "args": ["srv"], "env": {}}

    def test_agent_info_from_definition(self, code_cleaner_yaml: bytes) -> None:
        info = AgentInfo.from_definition(parse(code_cleaner_yaml))
        assert info == AgentInfo("code-cleaner", "1.0.0", "Keeps code tidy", "ax")


class TestDependencies:
    def test_missing_command_reported_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ax_schema.dependencies.shutil.which", lambda cmd: None)
        defn = AgentDefinition(
            name="a",
            version="1",
            mcp=(McpTool("one", "npx"), McpTool("two", "npx"), McpTool("three", "uv")),
        )
        missing = check_dependencies(defn)
        assert [m.command for m in missing] == ["npx", "uv"]
        assert missing[0].tools == ("one", "two")
        assert missing[0].hint is not None and "nodejs" in missing[0].hint

    def test_present_commands_not_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ax_schema.dependencies.shutil.which", lambda cmd: f"/usr/bin/{cmd}")
        defn = AgentDefinition(name="a", version="1", mcp=(McpTool("one", "npx"),))
        assert check_dependencies(defn) == []
