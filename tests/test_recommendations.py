from sharproast.recommendations import (BEST_PRACTICES, MAX_PER_CATEGORY, RECOMMENDATIONS, classify,
                                        recommendations_for)
from sharproast.utils.findings import Finding, FindingCollector


def make(severity, category):
    return Finding(id="R", file_path="A.cs", line_number=1, severity=severity,
                   description="d", category=category)


class TestRecommendationsFor:

    def test_severity_specific_template(self):
        recs = recommendations_for("SQL Injection", "critical", 3)
        assert recs[0] == "CRITICAL: Fix 3 SQL injection vulnerabilities NOW - these allow data breaches"

    def test_falls_back_to_category_default(self):
        recs = recommendations_for("Hardcoded Secrets", "low", 1)
        assert recs[0] == "Move 1 configuration values to appsettings or environment variables"

    def test_unknown_category(self):
        assert recommendations_for("Quantum Leakage", "high", 2) == [
            "Address 2 quantum leakage security issues based on severity level"
        ]

    def test_pattern_and_null_categories_have_guidance(self):
        for category in ("Cross-Site Scripting", "Path Traversal", "Server-Side Request Forgery",
                         "Code Injection", "Memory Safety", "Integer Overflow", "Timing Attacks",
                         "Null Reference"):
            recs = recommendations_for(category, "high", 2)
            assert "2" in recs[0]
            assert "based on severity level" not in recs[0]

    def test_category_lookup_ignores_case(self):
        assert recommendations_for("sql injection", "critical", 1) == recommendations_for("SQL Injection",
                                                                                          "critical", 1)

    def test_every_category_has_a_default(self):
        for category, table in RECOMMENDATIONS.items():
            assert "*" in table, category

    def test_best_practices(self):
        assert "Follow OWASP Top 10 guidelines" in BEST_PRACTICES


class TestClassify:

    def test_tiers_descend_and_categories_order_by_count(self):
        c = FindingCollector()
        c.extend([
            make("low", "Best Practices"),
            make("critical", "SQL Injection"),
            make("medium", "Authorization"),
            make("medium", "Input Validation"),
            make("medium", "Input Validation"),
        ])
        tiers = classify(c)
        assert [t.severity for t in tiers] == ["critical", "medium", "low"]
        assert tiers[0].heading == "CRITICAL Security Issues (IMMEDIATE ACTION REQUIRED)"
        assert [a.category for a in tiers[1].categories] == ["Input Validation", "Authorization"]
        assert tiers[1].categories[0].count == 2

    def test_at_most_three_recommendations(self):
        c = FindingCollector()
        c.add(make("critical", "Hardcoded Secrets"))
        advice = classify(c)[0].categories[0]
        assert len(advice.recommendations) == MAX_PER_CATEGORY
        assert advice.recommendations[0].startswith("URGENT: Remove 1 hardcoded secrets")

    def test_empty_collector(self):
        assert classify(FindingCollector()) == []
