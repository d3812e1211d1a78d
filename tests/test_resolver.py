"""Tests for model resolution against an inventory snapshot."""

import pytest

from vajra.errors import NoModelAvailable
from vajra.probe import ModelInventorySnapshot
from vajra.resolver import (
    CODING_PRIORITY,
    check_availability,
    resolve,
    smart_default_model,
    suggest_model,
)


def snap(*names):
    return ModelInventorySnapshot.of(names)


# ─────────────────────────────────────────────────────────────────────
# RESOLVE
# ─────────────────────────────────────────────────────────────────────

class TestResolve:
    def test_exact_match_is_unchanged(self):
        outcome = resolve("llama2:latest", snap("llama2:latest", "qwen2.5-coder:7b"))

        assert outcome.resolved_model == "llama2:latest"
        assert outcome.was_substituted is False
        assert outcome.notice is None

    def test_exact_match_beats_priority(self):
        outcome = resolve("codellama:7b", snap("qwen2.5-coder:7b", "codellama:7b"))
        assert outcome.resolved_model == "codellama:7b"

    def test_priority_list_substitution(self):
        outcome = resolve("nonexistent:1b", snap("codellama:7b", "qwen2.5-coder:7b"))

        assert outcome.resolved_model == "qwen2.5-coder:7b"
        assert outcome.requested_model == "nonexistent:1b"
        assert outcome.was_substituted is True

    def test_falls_back_to_first_installed(self):
        outcome = resolve("qwen2.5-coder:7b", snap("llama2:latest", "phi3:mini"))

        assert outcome.resolved_model == "llama2:latest"
        assert outcome.was_substituted is True

    def test_notice_names_both_models_and_pull_command(self):
        outcome = resolve("qwen2.5-coder:7b", snap("llama2:latest"))

        assert "llama2:latest" in outcome.notice
        assert "ollama pull qwen2.5-coder:7b" in outcome.notice

    def test_empty_snapshot_raises(self):
        with pytest.raises(NoModelAvailable) as exc_info:
            resolve("qwen2.5-coder:7b", snap())

        assert exc_info.value.requested_model == "qwen2.5-coder:7b"

    @pytest.mark.parametrize("requested", [
        "qwen2.5-coder:7b", "llama2:latest", "gpt-4o", "", "mistral:7b",
    ])
    def test_result_always_installed(self, requested):
        snapshot = snap("mistral:7b", "starcoder2:7b", "llama2:latest")
        assert resolve(requested, snapshot).resolved_model in snapshot.installed_models

    def test_idempotent(self):
        snapshot = snap("llama2:latest", "deepseek-coder:6.7b")
        first = resolve("anything:1b", snapshot)
        second = resolve(first.resolved_model, snapshot)

        assert second.resolved_model == first.resolved_model
        assert second.was_substituted is False

    def test_custom_priority(self):
        outcome = resolve("x", snap("a:1", "b:1"), priority=("b:1",))
        assert outcome.resolved_model == "b:1"


class TestSmartDefault:
    def test_walks_priority_in_order(self):
        snapshot = snap("starcoder2:7b", "deepseek-coder:6.7b", "codellama:7b")
        assert smart_default_model(snapshot) == "deepseek-coder:6.7b"

    def test_empty_raises(self):
        with pytest.raises(NoModelAvailable):
            smart_default_model(snap())

    def test_priority_starts_with_recommended(self):
        assert CODING_PRIORITY[0] == "qwen2.5-coder:7b"


# ─────────────────────────────────────────────────────────────────────
# SUGGESTIONS
# ─────────────────────────────────────────────────────────────────────

class TestSuggestModel:
    @pytest.mark.parametrize("requested,recommended", [
        ("qwen3-coder:30b", "qwen2.5-coder:7b"),
        ("deepseek-r1:8b", "deepseek-coder-v2:16b"),
        ("codellama:70b", "codellama:34b"),
        ("starcoder:15b", "starcoder2:7b"),
        ("mycode-model", "qwen2.5-coder:7b"),
        ("tiny-light", "qwen2.5-coder:1.5b"),
        ("mixtral-large", "qwen2.5-coder:32b"),
        ("llama2", "qwen2.5-coder:7b"),
    ])
    def test_mapping(self, requested, recommended):
        assert suggest_model(requested).recommended == recommended

    def test_starcoder2_not_treated_as_v1(self):
        assert suggest_model("starcoder2:3b").recommended == "qwen2.5-coder:7b"


class TestCheckAvailability:
    def test_bare_name_matches_tagged(self):
        assert check_availability("llama2", snap("llama2:latest")).available is True

    def test_prefix_is_not_a_match(self):
        result = check_availability("llama", snap("llama2:latest"))
        assert result.available is False

    def test_missing_model_gets_pull_command(self):
        result = check_availability("deepseek-r1:8b", snap("llama2:latest"))

        assert result.available is False
        assert "DeepSeek-R1" in result.suggestion
        assert result.pull_command == "ollama pull deepseek-coder-v2:16b"

    def test_empty_snapshot_suggests_installing_ollama(self):
        result = check_availability("qwen2.5-coder:7b", snap())

        assert result.available is False
        assert "https://ollama.com/download" in result.suggestion
        assert "install.sh" in result.pull_command
