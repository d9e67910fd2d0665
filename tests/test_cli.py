"""Tests for the admitwriter CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from admitwriter.cli import app
from admitwriter.llm.models import LLMError, LLMResponse, TokenUsage

runner = CliRunner()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def workdir(tmp_path, monkeypatch, profile_data):
    """Isolated cwd with a profile file and no config files in reach."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    monkeypatch.setenv("USER", "priya")
    monkeypatch.setenv("LOGNAME", "priya")
    (tmp_path / "profile.json").write_text(json.dumps(profile_data), encoding="utf-8")
    return tmp_path


@pytest.fixture()
def llm(mock_llm_provider):
    """Patch provider creation at the CLI import site."""
    with patch("admitwriter.cli.create_llm_provider", return_value=mock_llm_provider):
        yield mock_llm_provider


def _write_section(section_id: str, *extra: str):
    return runner.invoke(
        app,
        ["section", "profile.json", section_id, "--session", "session.json", "--target", "ISB", *extra],
    )


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_no_stream(self, workdir, llm):
        result = runner.invoke(app, ["generate", "profile.json", "--target", "ISB", "--no-stream"])

        assert result.exit_code == 0, result.output
        assert "Generated section text." in result.output
        assert "SOP Complete" in result.output
        kwargs = llm.generate.call_args.kwargs
        assert kwargs["max_tokens"] == 4000
        assert kwargs["temperature"] == 0.7
        assert "ISB" in kwargs["user"]

    def test_stream(self, workdir, llm):
        result = runner.invoke(app, ["generate", "profile.json", "-t", "ISB"])

        assert result.exit_code == 0, result.output
        assert "Writing" in result.output
        assert "Generated section text." in result.output
        llm.generate_stream.assert_called_once()
        llm.generate.assert_not_called()

    def test_save_writes_document(self, workdir, llm):
        result = runner.invoke(
            app, ["generate", "profile.json", "-t", "ISB", "--no-stream", "--save", "-o", "out"]
        )

        assert result.exit_code == 0, result.output
        (saved,) = (workdir / "out" / "documents").glob("SOP-for-ISB-*.sop.md")
        text = saved.read_text(encoding="utf-8")
        assert "owner: priya" in text
        assert text.rstrip().endswith("Generated section text.")

    def test_save_twice_keeps_both(self, workdir, llm):
        for _ in range(2):
            result = runner.invoke(app, ["generate", "profile.json", "-t", "ISB", "--no-stream", "--save"])
            assert result.exit_code == 0, result.output
        assert len(list((workdir / ".admitwriter" / "documents").glob("*.sop.md"))) == 2

    def test_save_dry_run_writes_nothing(self, workdir, llm):
        result = runner.invoke(
            app, ["generate", "profile.json", "-t", "ISB", "--no-stream", "--save", "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert "Would save" in result.output
        assert not (workdir / ".admitwriter").exists()

    def test_blank_target_fails(self, workdir, llm):
        result = runner.invoke(app, ["generate", "profile.json", "-t", "  ", "--no-stream"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        llm.generate.assert_not_called()

    def test_missing_profile_fails(self, workdir, llm):
        result = runner.invoke(app, ["generate", "nope.json", "-t", "ISB"])
        assert result.exit_code == 1
        assert "Profile file not found" in result.output

    def test_transport_error(self, workdir, llm):
        llm.generate = AsyncMock(side_effect=LLMError("openai", "generate", RuntimeError("down")))
        result = runner.invoke(app, ["generate", "profile.json", "-t", "ISB", "--no-stream"])
        assert result.exit_code == 1
        assert "Generation failed" in result.output


# ---------------------------------------------------------------------------
# section / assemble / discard
# ---------------------------------------------------------------------------


class TestSectionWorkflow:
    def test_section_is_stored_in_session_file(self, workdir, llm):
        result = _write_section("opening", "--no-stream")

        assert result.exit_code == 0, result.output
        assert "Stored" in result.output
        data = json.loads((workdir / "session.json").read_text())
        assert [s["section_id"] for s in data["sections"]] == ["opening"]
        assert data["sections"][0]["text"] == "Generated section text."
        assert llm.generate.call_args.kwargs["max_tokens"] == 1000

    def test_streamed_section_is_stored(self, workdir, llm):
        result = _write_section("journey")

        assert result.exit_code == 0, result.output
        data = json.loads((workdir / "session.json").read_text())
        assert data["sections"][0]["section_id"] == "journey"

    def test_later_sections_see_earlier_ones(self, workdir, llm):
        _write_section("opening", "--no-stream")
        _write_section("journey", "--no-stream")

        assert "Generated section text." in llm.generate.call_args.kwargs["user"]

    def test_unknown_section(self, workdir, llm):
        result = _write_section("epilogue", "--no-stream")
        assert result.exit_code == 1
        assert "Unknown section" in result.output
        assert not (workdir / "session.json").exists()

    def test_assemble_after_quorum(self, workdir, llm):
        for sid in ("opening", "journey", "whyProgram"):
            assert _write_section(sid, "--no-stream").exit_code == 0

        result = runner.invoke(app, ["assemble", "--session", "session.json"])

        assert result.exit_code == 0, result.output
        assert "Assembled 3 sections" in result.output
        assert llm.generate.call_count == 3

    def test_assemble_before_quorum(self, workdir, llm):
        _write_section("opening", "--no-stream")
        result = runner.invoke(app, ["assemble", "-s", "session.json"])
        assert result.exit_code == 1
        assert "Need at least 3" in result.output

    def test_assemble_quorum_override(self, workdir, llm):
        _write_section("opening", "--no-stream")
        result = runner.invoke(app, ["assemble", "-s", "session.json", "-q", "1"])
        assert result.exit_code == 0, result.output
        assert "Assembled 1 sections" in result.output

    def test_assemble_save_requires_target(self, workdir, llm):
        result = runner.invoke(app, ["assemble", "-s", "session.json", "--save"])
        assert result.exit_code == 1
        assert "--target is required" in result.output

    def test_assemble_save(self, workdir, llm):
        _write_section("opening", "--no-stream")
        result = runner.invoke(
            app, ["assemble", "-s", "session.json", "-q", "1", "--save", "-t", "ISB"]
        )
        assert result.exit_code == 0, result.output
        assert len(list((workdir / ".admitwriter" / "documents").glob("SOP-for-ISB-*.sop.md"))) == 1

    def test_assemble_save_dry_run(self, workdir, llm):
        _write_section("opening", "--no-stream")
        result = runner.invoke(
            app, ["assemble", "-s", "session.json", "-q", "1", "--save", "-t", "ISB", "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert "Would save" in result.output
        assert not (workdir / ".admitwriter").exists()

    @pytest.mark.parametrize("quorum", ["0", "9"])
    def test_assemble_rejects_out_of_range_quorum(self, workdir, llm, quorum):
        result = runner.invoke(app, ["assemble", "-s", "session.json", "-q", quorum])
        assert result.exit_code == 1
        assert "quorum must be between" in result.output

    def test_discard(self, workdir, llm):
        _write_section("opening", "--no-stream")

        result = runner.invoke(app, ["discard", "opening", "--session", "session.json"])
        assert result.exit_code == 0, result.output
        assert "Discarded" in result.output
        assert json.loads((workdir / "session.json").read_text())["sections"] == []

        again = runner.invoke(app, ["discard", "opening", "--session", "session.json"])
        assert again.exit_code == 0
        assert "was not written yet" in again.output

    def test_discard_accepts_alias(self, workdir, llm):
        _write_section("whyProgram", "--no-stream")
        result = runner.invoke(app, ["discard", "whyMba", "-s", "session.json"])
        assert result.exit_code == 0, result.output
        assert "whyProgram" in result.output

    def test_discard_unknown(self, workdir):
        result = runner.invoke(app, ["discard", "epilogue", "-s", "session.json"])
        assert result.exit_code == 1
        assert "Unknown section" in result.output


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


_ANALYSIS = {
    "overallScore": 81,
    "summary": "Clear story.",
    "scores": {
        c: {"score": 8, "comment": "ok"}
        for c in (
            "opening",
            "storytelling",
            "specificity",
            "whyMba",
            "whySchool",
            "authenticity",
            "structure",
            "language",
        )
    },
    "strengths": ["Numbers"],
    "improvements": [{"issue": "Fit", "suggestion": "Name courses", "priority": "medium"}],
    "cliches": [],
    "wordCountAnalysis": "Fine.",
    "admissionChance": "medium",
}


class TestReview:
    def _sop(self, workdir: Path) -> Path:
        path = workdir / "sop.md"
        body = "I rebuilt the battery validation process at Tata Motors. " * 5
        path.write_text(f"---\ntitle: SOP for ISB\n---\n\n{body}\n", encoding="utf-8")
        return path

    def test_json_output(self, workdir, llm):
        llm.generate = AsyncMock(
            return_value=LLMResponse(
                content=json.dumps(_ANALYSIS),
                usage=TokenUsage(input_tokens=1, output_tokens=1),
                model="test-model",
            )
        )
        self._sop(workdir)

        result = runner.invoke(app, ["review", "sop.md", "-t", "ISB", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert '"overallScore": 81' in result.output
        user = llm.generate.call_args.kwargs["user"]
        assert "title: SOP for ISB" not in user
        assert "Tata Motors" in user

    def test_table_output(self, workdir, llm):
        llm.generate = AsyncMock(
            return_value=LLMResponse(
                content=json.dumps(_ANALYSIS),
                usage=TokenUsage(input_tokens=1, output_tokens=1),
                model="test-model",
            )
        )
        self._sop(workdir)

        result = runner.invoke(app, ["review", "sop.md", "-t", "ISB"])

        assert result.exit_code == 0, result.output
        assert "81/100" in result.output
        assert "Criteria" in result.output

    def test_unparsable_review(self, workdir, llm):
        self._sop(workdir)
        result = runner.invoke(app, ["review", "sop.md", "-t", "ISB"])
        assert result.exit_code == 1
        assert "Generation failed" in result.output

    def test_missing_file(self, workdir, llm):
        result = runner.invoke(app, ["review", "missing.md", "-t", "ISB"])
        assert result.exit_code == 1
        assert "File not found" in result.output


# ---------------------------------------------------------------------------
# Inspection and config commands
# ---------------------------------------------------------------------------


class TestInspection:
    def test_profile(self, workdir):
        result = runner.invoke(app, ["profile", "profile.json"])
        assert result.exit_code == 0, result.output
        assert "Personal Background" in result.output
        assert "Priya Sharma" in result.output

    def test_profile_must_be_mapping(self, workdir):
        (workdir / "list.yaml").write_text("- a\n- b\n")
        result = runner.invoke(app, ["profile", "list.yaml"])
        assert result.exit_code == 1
        assert "must contain a mapping" in result.output

    def test_sections(self, workdir):
        result = runner.invoke(app, ["sections"])
        assert result.exit_code == 0, result.output
        assert "Sections (5)" in result.output
        assert "opening" in result.output


class TestConfigCommands:
    def test_init_creates_file(self, workdir):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0, result.output
        assert (workdir / "admitwriter.yaml").exists()

    def test_init_refuses_overwrite(self, workdir):
        (workdir / "admitwriter.yaml").write_text("log_level: info\n")
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output

        forced = runner.invoke(app, ["config", "init", "--force"])
        assert forced.exit_code == 0
        assert "quorum" in (workdir / "admitwriter.yaml").read_text()

    def test_show(self, workdir):
        (workdir / "admitwriter.yaml").write_text("writer:\n  quorum: 4\n")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0, result.output
        assert "quorum: 4" in result.output

    def test_missing_config_path(self, workdir):
        result = runner.invoke(app, ["--config", "missing.yaml", "sections"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output
