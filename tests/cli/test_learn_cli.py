"""Tests for the learn CLI commands."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from qtlearn.cli import cli


runner = CliRunner()


@pytest.fixture
def graph_file(people_graph, tmp_path):
    path = tmp_path / "people.json"
    people_graph.save_json(path)
    return path


@pytest.fixture
def config_file(tmp_path):
    """Path of a config file that does not exist, so defaults apply."""
    return tmp_path / "learner.yaml"


class TestRunCommand:
    """Tests for 'qtlearn learn run'."""

    def test_json_output(self, graph_file, config_file):
        result = runner.invoke(cli, [
            "learn", "run", str(graph_file),
            "--pos", "alice", "--pos", "bob", "--neg", "rex",
            "--config", str(config_file),
            "--format", "json",
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["solution"]["score"]["score"] == pytest.approx(1.0)
        assert sorted(data["solution"]["score"]["covered_positives"]) == ["alice", "bob"]
        assert len(data["partial_solutions"]) == 1
        assert data["run"]["stop_reason"] == "no_positives"

    def test_table_output(self, graph_file, config_file):
        result = runner.invoke(cli, [
            "learn", "run", str(graph_file),
            "--pos", "alice", "--pos", "bob", "--pos", "rex2",
            "--neg", "rex", "--neg", "fido", "--neg", "spot",
            "--config", str(config_file),
        ])

        assert result.exit_code == 0
        assert "Partial Solutions (2 accepted)" in result.stdout
        assert "Accuracy: 1.0000" in result.stdout

    def test_examples_file(self, graph_file, config_file, tmp_path):
        examples = tmp_path / "examples.yaml"
        examples.write_text(yaml.safe_dump({"positives": ["alice", "bob"], "negatives": ["rex"]}))

        result = runner.invoke(cli, [
            "learn", "run", str(graph_file),
            "--examples", str(examples),
            "--config", str(config_file),
            "--format", "json",
        ])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["success"] is True

    def test_no_acceptable_solution(self, graph_file, tmp_path):
        config = tmp_path / "strict.yaml"
        config.write_text("minimum_tree_score: 0.99\n")

        result = runner.invoke(cli, [
            "learn", "run", str(graph_file),
            "--pos", "alice", "--pos", "rex2",
            "--neg", "rex", "--neg", "fido",
            "--config", str(config),
            "--format", "json",
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is False
        assert data["solution"] is None

    def test_requires_positive(self, graph_file, config_file):
        result = runner.invoke(cli, [
            "learn", "run", str(graph_file), "--neg", "rex", "--config", str(config_file),
        ])

        assert result.exit_code == 1
        assert "positive example" in result.stdout

    def test_overlapping_examples(self, graph_file, config_file):
        result = runner.invoke(cli, [
            "learn", "run", str(graph_file),
            "--pos", "alice", "--neg", "alice",
            "--config", str(config_file),
        ])

        assert result.exit_code == 1
        assert "CONFIGURATION_ERROR" in result.stdout

    def test_missing_graph(self, tmp_path, config_file):
        result = runner.invoke(cli, [
            "learn", "run", str(tmp_path / "missing.json"),
            "--pos", "alice",
            "--config", str(config_file),
        ])

        assert result.exit_code == 1
        assert "GRAPH_LOAD_ERROR" in result.stdout

    def test_invalid_format(self, graph_file):
        result = runner.invoke(cli, ["learn", "run", str(graph_file), "--pos", "alice", "--format", "xml"])

        assert result.exit_code == 1
        assert "Invalid format" in result.stdout

    def test_max_time_override(self, graph_file, config_file):
        result = runner.invoke(cli, [
            "learn", "run", str(graph_file),
            "--pos", "alice", "--pos", "bob", "--neg", "rex",
            "--config", str(config_file),
            "--max-time", "5",
            "--format", "json",
        ])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["success"] is True


class TestShowConfigCommand:
    """Tests for 'qtlearn learn show-config'."""

    def test_defaults(self, config_file):
        result = runner.invoke(cli, ["learn", "show-config", "--config", str(config_file)])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["minimum_tree_score"] == 0.2
        assert data["heuristic"] == "weighted_accuracy"
        assert data["trees"]["max_depth"] == 2

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "learner.yaml"
        config.write_text("coverage_beta: -1\n")

        result = runner.invoke(cli, ["learn", "show-config", "--config", str(config)])

        assert result.exit_code == 1
        assert "INVALID_CONFIG" in result.stdout
