import json

import pytest
from typer.testing import CliRunner

from dealscout.cli import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    """Run a CLI command against a throwaway database file."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"

    def _invoke(*args):
        return runner.invoke(app, ["--database-url", database_url, *args])

    return _invoke


def test_personas_empty(invoke):
    result = invoke("personas")
    assert result.exit_code == 0
    assert "No personas yet" in result.output


def test_init_defaults_and_switch(invoke):
    result = invoke("init-defaults")
    assert result.exit_code == 0
    assert "Added 4 personas" in result.output
    assert "Investment Banker" in result.output

    result = invoke("switch", "early stage vc")
    assert result.exit_code == 0
    assert "Active persona: Early Stage VC" in result.output


def test_switch_unknown_persona(invoke):
    result = invoke("switch", "nobody")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_score_without_persona(invoke):
    result = invoke("score", "serial_founder")
    assert result.exit_code == 0
    assert "No persona loaded" in result.output
    assert "BORDERLINE" in result.output


def test_score_with_active_persona(invoke):
    invoke("init-defaults")
    invoke("switch", "Early Stage VC")

    result = invoke("score", "serial_founder, prior_exit")
    assert result.exit_code == 0
    assert "87" in result.output
    assert "STRONG_PASS" in result.output
    assert "+serial_founder" in result.output


def test_bulk_feedback_requires_active_persona(invoke):
    result = invoke("bulk-like", "per_1,per_2", "--attributes", "yc_alumni")
    assert result.exit_code == 1
    assert "No persona loaded" in result.output


def test_bulk_feedback_stats_and_export(invoke, tmp_path):
    invoke("init-defaults")
    invoke("switch", "Early Stage VC")

    result = invoke("bulk-like", "per_1,per_2", "--attributes", "yc_alumni,prior_exit")
    assert result.exit_code == 0
    assert "Liked 2" in result.output

    result = invoke("bulk-dislike", "per_3", "-a", "yc_alumni")
    assert result.exit_code == 0
    assert "Disliked 1" in result.output

    result = invoke("stats")
    assert "Total feedback: 3" in result.output
    assert "Likes: 2" in result.output
    assert "Dislikes: 1" in result.output

    result = invoke("weights")
    assert result.exit_code == 0
    assert "prior_exit" in result.output

    output = tmp_path / "export" / "training.json"
    result = invoke("export", "--output", str(output))
    assert result.exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["persona_name"] == "Early Stage VC"
    assert data["feedback_count"] == 3
    assert {w["attribute"]: w["weight"] for w in data["learned_weights"]} == pytest.approx(
        {"yc_alumni": 1 / 3, "prior_exit": 1.0}
    )

    result = invoke("sync-queue")
    assert result.exit_code == 0
    assert "per_3" in result.output


def test_export_all_and_dpo(invoke, tmp_path):
    invoke("init-defaults")
    invoke("switch", "Early Stage VC")
    invoke("bulk-like", "per_1", "--attributes", "yc_alumni")
    invoke("bulk-dislike", "co_1", "--type", "company", "--persona", "Private Equity", "-a", "startup_only")

    combined = tmp_path / "training-all.json"
    result = invoke("export", "--all", "--output", str(combined))
    assert result.exit_code == 0
    assert "Exported 2 personas" in result.output
    data = json.loads(combined.read_text(encoding="utf-8"))
    assert [p["persona_name"] for p in data["personas"]] == ["Early Stage VC", "Private Equity"]

    dpo = tmp_path / "training-dpo.jsonl"
    result = invoke("export", "--all", "--dpo", "--output", str(dpo))
    assert result.exit_code == 0
    assert "Exported 2 DPO examples" in result.output
    lines = [json.loads(line) for line in dpo.read_text(encoding="utf-8").splitlines()]
    assert [line["entity_id"] for line in lines] == ["per_1", "co_1"]
    assert lines[1]["chosen"].startswith("This candidate is not a good fit. Concerns: startup_only")

    result = invoke("export", "--dpo")
    assert result.exit_code == 0
    assert json.loads(result.output.strip())["entity_id"] == "per_1"
