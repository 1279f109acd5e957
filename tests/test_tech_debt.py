"""
Tests for Tech Debt Evaluation — block and structure heuristics.
"""

from veracity.scanners.tech_debt import (
    LARGE_FILE_LINES,
    check_maintainability,
    evaluate_tech_debt,
)


def categories(findings):
    return {f.category for f in findings}


def test_sql_template_is_security_error():
    text = "```js\nconst q = `SELECT * FROM users WHERE id = ${id}`;\n```"

    report = evaluate_tech_debt(text)

    assert "sql_injection" in categories(report.errors)
    assert not report.is_valid


def test_deep_nesting_and_complexity():
    code = "\n".join([
        "function a() {",
        " if (x) {",
        "  if (y) {",
        "   if (z) {",
        "    if (w) {",
        "     if (v) {",
        "      run();",
        "     }",
        "    }",
        "   }",
        "  }",
        " }",
        "}",
    ])

    report = evaluate_tech_debt(f"```js\n{code}\n```")

    assert {"deep_nesting", "high_complexity"} <= categories(report.warnings)


def test_magic_number_and_long_line():
    long_line = "const label = '" + "a" * 130 + "';"
    report = evaluate_tech_debt(f"```js\nconst timeout = 30000;\n{long_line}\n```")

    assert {"magic_number", "long_line"} <= categories(report.warnings)


def test_event_listener_without_removal():
    report = evaluate_tech_debt("```js\nbutton.addEventListener('click', go);\n```")

    assert "memory_leak" in categories(report.warnings)


def test_large_text_is_flagged():
    text = "\n".join(["line"] * (LARGE_FILE_LINES + 1))

    report = evaluate_tech_debt(text)

    assert categories(report.warnings) == {"large_file"}


def test_comment_ratio_bounds():
    assert categories(check_maintainability(["a = 1", "b = 2"])) == {"low_documentation"}
    assert categories(check_maintainability(["# one", "# two", "a = 1"])) == {"over_documentation"}
    assert check_maintainability(["# one", "a = 1", "b = 2"]) == []
    assert check_maintainability(["", "  "]) == []


def test_prose_has_no_findings():
    report = evaluate_tech_debt("Just prose without any code.")

    assert report.errors == []
    assert report.warnings == []
