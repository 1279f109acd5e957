"""
Tests for Validation Pipeline — stage ordering, aggregation, fallback and the minimal path.
"""

import asyncio

from veracity.core.rewriter import ANNOTATION_NOTES, STRIP_NOTE, ResponseRewriter
from veracity.core.rule_engine import RuleEngine
from veracity.engine.pipeline import ValidationPipeline
from veracity.scanners.cross_check import ClaimCrossChecker

SCENARIO = "I have successfully implemented the login feature and tested it"


def run(coro):
    return asyncio.run(coro)


def test_empty_text_short_circuits(pipeline, workspace):
    result = run(pipeline.validate("   "))

    assert result.is_valid is False
    assert [e.category for e in result.errors] == ["empty_content"]
    assert result.warnings == []
    assert result.validated_text == "   "
    assert workspace.exists_calls == []
    assert workspace.list_calls == 0


def test_literal_empty_string_is_a_single_structural_error(pipeline, workspace):
    result = run(pipeline.validate(""))

    assert result.is_valid is False
    assert len(result.errors) == 1
    assert result.errors[0].category == "empty_content"
    assert result.validated_text == ""
    assert result.change_log == []
    assert workspace.exists_calls == []
    assert workspace.stat_calls == []
    assert workspace.list_calls == 0


def test_unverified_success_claim_is_invalid(pipeline, seeded_store):
    result = run(pipeline.validate(SCENARIO))

    assert result.is_valid is False
    assert result.is_valid == (not result.errors)
    assert "ai_hallucination" in {e.category for e in result.errors}
    assert {"unverified_implementation_claim", "unverified_testing_claim"} <= {
        w.category for w in result.warnings
    }
    assert result.change_log == [
        ANNOTATION_NOTES["completion_claim"],
        ANNOTATION_NOTES["test_claim"],
    ]
    assert result.original_text == SCENARIO
    assert seeded_store.find_by_name("Task Completion Claim").usage_stats.triggers == 1


def test_rule_matches_contribute_purpose_suggestions(pipeline):
    result = run(pipeline.validate(SCENARIO))

    assert result.suggestions[:2] == [
        'Replace "implemented" with actual implementation',
        "Add proper error handling",
    ]
    assert 'Replace "tested" with actual implementation' in result.suggestions
    assert result.suggestions.count("Add proper error handling") == 1


def test_matches_reach_the_alert_sink(pipeline, sink):
    run(pipeline.validate(SCENARIO))

    assert ('Rule "Task Completion Claim" triggered: implemented', ()) in sink.notified


def test_stalling_is_stripped_and_footer_appended(pipeline):
    result = run(pipeline.validate("The patch is ready. Just let me know if you want changes."))

    assert result.is_valid is True
    assert result.applied_changes is True
    assert result.change_log == [STRIP_NOTE]
    assert result.validated_text.startswith("The patch is ready.")
    assert "let me know" not in result.validated_text.lower()
    assert "**Veracity Passive Validation Applied**" in result.validated_text
    assert f"*{STRIP_NOTE}*" in result.validated_text


def test_unchanged_text_has_no_footer(pipeline):
    result = run(pipeline.validate("Sunny weather today."))

    assert result.applied_changes is False
    assert result.validated_text == "Sunny weather today."


def test_stage_failure_falls_back_to_banner(seeded_store, scheduler, workspace):
    class ExplodingScanner:
        async def scan(self, text):
            raise RuntimeError("scanner exploded")

    pipeline = ValidationPipeline(
        store=seeded_store,
        engine=RuleEngine(seeded_store, scheduler=scheduler),
        rewriter=ResponseRewriter(),
        scanner=ExplodingScanner(),
        cross_checker=ClaimCrossChecker(),
        workspace=workspace,
    )

    result = run(pipeline.validate("Just some text."))

    assert result.is_valid is False
    assert [(e.type.value, e.category) for e in result.errors] == [("safety", "validation_error")]
    assert result.warnings == []
    assert result.validated_text.startswith("Just some text.")
    assert "Veracity Validation Failed" in result.validated_text
    assert "scanner exploded" in result.validated_text

    stats = pipeline.get_stats()
    assert stats.total_responses == 1
    assert stats.validated_responses == 0


def test_minimal_runs_only_allow_listed_rules(pipeline, workspace):
    text = "I implemented the parser and it is done. Just let me know if you want more."

    result = run(pipeline.validate_minimal(text))

    assert result.is_valid is True
    assert result.errors == []
    assert result.change_log == [
        ANNOTATION_NOTES["implementation_claim"],
        ANNOTATION_NOTES["completion_claim"],
        STRIP_NOTE,
    ]
    assert "let me know" not in result.validated_text.lower()
    assert workspace.exists_calls == []
    assert workspace.list_calls == 0


def test_minimal_with_empty_text(pipeline):
    result = run(pipeline.validate_minimal(""))

    assert result.is_valid is False
    assert [e.category for e in result.errors] == ["empty_content"]


def test_stats_and_audit_trail(pipeline):
    run(pipeline.validate("The patch is ready. Just let me know if you want changes."))
    run(pipeline.validate_minimal("Sunny weather today."))

    stats = pipeline.get_stats()
    assert stats.total_responses == 2
    assert stats.validated_responses == 2
    assert stats.applied_changes == 1
    assert stats.average_processing_time_ms >= 0
    assert stats.last_validation is not None

    entries = pipeline.audit_logger.read_recent()
    assert [(e["mode"], e["is_valid"], e["change_count"]) for e in entries] == [
        ("full", True, 1),
        ("minimal", True, 0),
    ]
    assert entries[0]["context_label"] == "AI Response"
