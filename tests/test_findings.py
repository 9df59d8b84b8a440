import threading

import pytest
from pydantic import ValidationError

from sharproast.utils.findings import Finding, FindingCollector, severity_rank


def make(severity="high", category="SQL Injection", line=1, rule="R"):
    return Finding(id=rule, file_path="A.cs", line_number=line, severity=severity,
                   description="d", category=category)


class TestFinding:

    def test_is_immutable(self):
        f = make()
        with pytest.raises(ValidationError):
            f.severity = "low"

    def test_rejects_unknown_severity(self):
        with pytest.raises(ValidationError):
            make(severity="urgent")

    def test_rejects_zero_line(self):
        with pytest.raises(ValidationError):
            make(line=0)

    def test_rejects_empty_category(self):
        with pytest.raises(ValidationError):
            make(category="")

    def test_severity_ranking(self):
        assert severity_rank("critical") > severity_rank("high") > severity_rank("medium") > severity_rank("low")


class TestFindingCollector:

    def test_counts_are_zero_filled(self):
        c = FindingCollector()
        c.add(make("low"))
        assert c.count_by_severity() == {"critical": 0, "high": 0, "medium": 0, "low": 1}

    def test_group_by_category_orders_by_count_then_first_seen(self):
        c = FindingCollector()
        c.extend([make(category="A"), make(category="B"), make(category="C"),
                  make(category="B"), make(category="A"), make(category="B"), make(category="C")])
        assert list(c.group_by_category().items()) == [("B", 3), ("A", 2), ("C", 2)]

    def test_group_by_category_for_one_severity(self):
        c = FindingCollector()
        c.extend([make("high", "A"), make("low", "B"), make("high", "A")])
        assert c.group_by_category("high") == {"A": 2}
        assert c.group_by_category("critical") == {}

    def test_sorted_by_severity_is_stable(self):
        c = FindingCollector()
        c.extend([make("low", rule="1"), make("critical", rule="2"), make("low", rule="3"),
                  make("critical", rule="4")])
        assert [f.id for f in c.sorted_by_severity()] == ["2", "4", "1", "3"]

    def test_queries_do_not_mutate(self):
        c = FindingCollector()
        c.extend([make("low"), make("critical")])
        before = c.snapshot()
        c.sorted_by_severity()
        c.group_by_category()
        c.count_by_severity()
        assert c.snapshot() == before

    def test_by_severity(self):
        c = FindingCollector()
        c.extend([make("low", rule="1"), make("high", rule="2")])
        assert [f.id for f in c.by_severity("high")] == ["2"]

    def test_blocking(self):
        c = FindingCollector()
        c.extend([make("low"), make("medium")])
        assert not c.has_blocking()
        c.add(make("high"))
        assert c.has_blocking()

    def test_concurrent_appends(self):
        c = FindingCollector()

        def worker():
            for i in range(200):
                c.add(make(line=i + 1))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(c) == 1600
