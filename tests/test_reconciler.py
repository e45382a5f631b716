"""Tests for cross-run issue reconciliation."""

from datetime import datetime, timezone


def make_result(per_file):
    from ci_reviewer.orchestrator.aggregator import ResultAggregator

    result = ResultAggregator().aggregate(per_file)
    result.timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return result


class TestReconcile:
    """Tests for reconcile and compute_delta."""

    def test_fixed_is_exactly_the_missing_key(self, make_finding):
        """Test fixed is exactly the missing key."""
        from ci_reviewer.models.findings import Category
        from ci_reviewer.orchestrator.reconciler import reconcile

        previous = make_result(
            {
                "fileA": [
                    make_finding(line=5, category=Category.SECURITY, issue="XSS via {@html}"),
                    make_finding(line=9, category=Category.PERFORMANCE, issue="Heavy $effect"),
                ]
            }
        )
        current = make_result(
            {"fileA": [make_finding(line=5, category=Category.SECURITY, issue="Unsafe HTML")]}
        )

        fixed = reconcile(current, previous)

        assert [f.key for f in fixed] == [("fileA", 9, Category.PERFORMANCE)]
        assert fixed[0].issue == "Heavy $effect"

    def test_first_run_reports_nothing_fixed(self, make_finding):
        """Test first run reports nothing fixed."""
        from ci_reviewer.orchestrator.reconciler import reconcile

        current = make_result({"fileA": [make_finding()]})

        assert reconcile(current, None) == []

    def test_category_is_part_of_identity(self, make_finding):
        """Test category is part of identity."""
        from ci_reviewer.models.findings import Category
        from ci_reviewer.orchestrator.reconciler import reconcile

        previous = make_result({"fileA": [make_finding(line=5, category=Category.SECURITY)]})
        current = make_result({"fileA": [make_finding(line=5, category=Category.ACCESSIBILITY)]})

        assert len(reconcile(current, previous)) == 1

    def test_file_is_part_of_identity(self, make_finding):
        """Test file is part of identity."""
        from ci_reviewer.orchestrator.reconciler import reconcile

        previous = make_result({"fileA": [make_finding(line=5)]})
        current = make_result({"fileB": [make_finding(line=5)]})

        assert [f.file_path for f in reconcile(current, previous)] == ["fileA"]

    def test_delta_classifies_new_open_fixed(self, make_finding):
        """Test findings are split into new, open and fixed."""
        from ci_reviewer.orchestrator.reconciler import compute_delta

        previous = make_result({"fileA": [make_finding(line=1), make_finding(line=2)]})
        current = make_result({"fileA": [make_finding(line=2), make_finding(line=3)]})

        delta = compute_delta(current, previous)

        assert [f.line for _, f in delta.open_findings] == [2]
        assert [f.line for _, f in delta.new_findings] == [3]
        assert [f.line for f in delta.fixed_findings] == [1]
        assert not delta.is_first_run

    def test_all_resolved(self, make_finding):
        """Test every previous finding is fixed when the file comes back clean."""
        from ci_reviewer.orchestrator.reconciler import compute_delta

        previous = make_result({"fileA": [make_finding(line=1)]})

        delta = compute_delta(make_result({"fileA": []}), previous)

        assert delta.new_findings == []
        assert delta.open_findings == []
        assert len(delta.fixed_findings) == 1

    def test_first_run_delta(self, make_finding):
        """Test every current finding is new when there is no previous run."""
        from ci_reviewer.orchestrator.reconciler import compute_delta

        delta = compute_delta(make_result({"fileA": [make_finding()]}), None)

        assert delta.is_first_run
        assert len(delta.new_findings) == 1
        assert delta.fixed_findings == []
