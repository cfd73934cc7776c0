"""Tests for the CLI entry point."""

import json
from pathlib import Path
from textwrap import dedent

import pytest

from main import main, parse_args

SAMPLE_DATA = Path(__file__).resolve().parents[2] / "config" / "sample_data.yaml"


@pytest.fixture()
def config(tmp_path: Path) -> str:
    """Settings file with a temp database and embeddings disabled."""
    cfg = tmp_path / "settings.yaml"
    cfg.write_text(dedent(f"""\
        database:
          path: {tmp_path / "cli.db"}
        embedding:
          enabled: false
    """))
    return str(cfg)


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> str:
    main(list(argv))
    return capsys.readouterr().out


class TestParseArgs:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_defaults(self) -> None:
        args = parse_args(["run-bulk"])
        assert args.config == "config/settings.yaml"
        assert args.verbose is False
        assert args.dry_run is False

    def test_invalid_status_choice(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["set-status", "--allocation-id", "1", "--status", "hired"])


class TestSkillsCommand:
    def test_needs_no_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        out = _run(capsys, "skills", "--query", "sql", "--config", "/nonexistent.yaml")
        assert json.loads(out) == ["SQL", "PostgreSQL", "MySQL"]


class TestMatchCommand:
    def test_scores_request_file(
        self, capsys: pytest.CaptureFixture[str], config: str, tmp_path: Path,
    ) -> None:
        request = tmp_path / "request.json"
        request.write_text(json.dumps({
            "student_profile": {
                "skills": ["Python", "SQL"], "cgpa": 9.0,
                "location": "Bangalore", "diversity_flag": True,
            },
            "internships": [
                {"id": 1, "required_skills": ["Java"], "location": "Pune"},
                {"id": 2, "required_skills": ["Python", "Machine Learning"],
                 "location": "Bangalore"},
            ],
        }))
        data = json.loads(_run(capsys, "match", "--config", config, "--request", str(request)))
        assert [m["internship_id"] for m in data["matches"]] == [2, 1]
        assert data["matches"][0]["match_score"] == 73.0

    def test_missing_request_file(
        self, capsys: pytest.CaptureFixture[str], config: str,
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["match", "--config", config, "--request", "/nonexistent.json"])
        assert exc.value.code == 1
        assert "Request file not found" in capsys.readouterr().err


class TestDatabaseCommands:
    def test_import_bulk_stats(self, capsys: pytest.CaptureFixture[str], config: str) -> None:
        out = _run(capsys, "import-data", "--config", config, "--file", str(SAMPLE_DATA))
        assert "Imported 2 companies, 3 students, 3 internships." in out

        out = _run(capsys, "run-bulk", "--config", config)
        assert "Processed 3 students. Created 2 allocations." in out

        stats = json.loads(_run(capsys, "stats", "--config", config))
        assert stats == {
            "totalStudents": 3,
            "activeInternships": 3,
            "successfulMatches": 2,
            "avgMatchScore": 73.0,
        }

        fairness = json.loads(_run(capsys, "fairness", "--config", config))
        assert fairness["diversityPercentage"] == 33.3

    def test_dry_run(self, capsys: pytest.CaptureFixture[str], config: str) -> None:
        _run(capsys, "import-data", "--config", config, "--file", str(SAMPLE_DATA))
        out = _run(capsys, "run-bulk", "--config", config, "--dry-run")
        assert "[DRY RUN] Would create 2 allocations." in out
        stats = json.loads(_run(capsys, "stats", "--config", config))
        assert stats["successfulMatches"] == 0

    def test_preview_and_candidates(
        self, capsys: pytest.CaptureFixture[str], config: str,
    ) -> None:
        _run(capsys, "import-data", "--config", config, "--file", str(SAMPLE_DATA))

        preview = json.loads(_run(capsys, "preview", "--config", config, "--student-id", "1"))
        assert len(preview["matches"]) == 3

        candidates = json.loads(
            _run(capsys, "candidates", "--config", config, "--internship-id", "2")
        )
        assert candidates[0]["name"] == "Vikram Nair"
        assert "matchScore" in candidates[0]

    def test_audit_and_set_status(
        self, capsys: pytest.CaptureFixture[str], config: str,
    ) -> None:
        _run(capsys, "import-data", "--config", config, "--file", str(SAMPLE_DATA))
        _run(capsys, "run-bulk", "--config", config)

        out = _run(capsys, "set-status", "--config", config,
                   "--allocation-id", "1", "--status", "applied")
        assert "now 'applied'" in out

        audit = json.loads(_run(capsys, "audit", "--config", config, "--status", "applied"))
        assert len(audit["entries"]) == 1
        assert audit["entries"][0]["studentName"] == "Asha Rao"
        assert audit["summary"]["statusCounts"]["applied"] == 1

    def test_feedback(self, capsys: pytest.CaptureFixture[str], config: str) -> None:
        _run(capsys, "import-data", "--config", config, "--file", str(SAMPLE_DATA))
        out = _run(capsys, "feedback", "--config", config,
                   "--student-id", "1", "--internship-id", "1", "--value", "good")
        assert "Feedback recorded" in out


class TestErrors:
    def test_missing_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["stats", "--config", "/nonexistent/settings.yaml"])
        assert exc.value.code == 1
        assert "Error loading config" in capsys.readouterr().err

    def test_unknown_student(self, capsys: pytest.CaptureFixture[str], config: str) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["preview", "--config", config, "--student-id", "42"])
        assert exc.value.code == 1
        assert "Student profile not found: 42" in capsys.readouterr().err

    def test_unknown_allocation(self, capsys: pytest.CaptureFixture[str], config: str) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["set-status", "--config", config,
                  "--allocation-id", "5", "--status", "rejected"])
        assert exc.value.code == 1
        assert "Allocation not found: 5" in capsys.readouterr().err
