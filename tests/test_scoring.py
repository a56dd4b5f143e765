"""Unit tests for severity counting and the overall security score."""

import unittest

from app.services.scoring import aggregate, compute_overall_score, count_by_severity

from analysis_fixtures import finding


class TestCountBySeverity(unittest.TestCase):
    """Every severity level is present in the counts, even when zero."""

    def test_empty_list_has_all_levels(self) -> None:
        self.assertEqual(
            count_by_severity([]),
            {"critical": 0, "high": 0, "medium": 0, "low": 0},
        )

    def test_counts_each_level(self) -> None:
        findings = [finding("critical"), finding("low"), finding("low"), finding("medium")]
        self.assertEqual(
            count_by_severity(findings),
            {"critical": 1, "high": 0, "medium": 1, "low": 2},
        )


class TestComputeOverallScore(unittest.TestCase):
    """Score is 10 minus the weighted penalty, clamped to [0, 10]."""

    def test_no_findings_scores_ten(self) -> None:
        self.assertEqual(compute_overall_score({}), 10.0)

    def test_weights(self) -> None:
        self.assertEqual(compute_overall_score({"critical": 1}), 7.0)
        self.assertEqual(compute_overall_score({"high": 1}), 8.0)
        self.assertEqual(compute_overall_score({"medium": 1}), 9.0)
        self.assertEqual(compute_overall_score({"low": 1}), 9.5)

    def test_mixed(self) -> None:
        counts = {"critical": 1, "high": 1, "medium": 1, "low": 1}
        self.assertEqual(compute_overall_score(counts), 3.5)

    def test_two_critical_one_high(self) -> None:
        self.assertEqual(compute_overall_score({"critical": 2, "high": 1}), 2.0)

    def test_clamped_at_zero(self) -> None:
        self.assertEqual(compute_overall_score({"critical": 4}), 0.0)
        self.assertEqual(compute_overall_score({"critical": 50, "low": 3}), 0.0)

    def test_fractional_low_penalty(self) -> None:
        self.assertEqual(compute_overall_score({"low": 3}), 8.5)


class TestAggregate(unittest.TestCase):
    """aggregate() returns counts, a total equal to their sum, and the score."""

    def test_total_matches_counts(self) -> None:
        findings = [
            finding("critical"),
            finding("high"),
            finding("high"),
            finding("medium"),
            finding("low"),
        ]
        summary = aggregate(findings)
        self.assertEqual(summary.total, 5)
        self.assertEqual(summary.total, sum(summary.counts.values()))
        self.assertEqual(summary.counts["high"], 2)
        self.assertEqual(summary.overall_score, 10.0 - 3 - 4 - 1 - 0.5)

    def test_empty(self) -> None:
        summary = aggregate([])
        self.assertEqual(summary.total, 0)
        self.assertEqual(summary.overall_score, 10.0)

    def test_is_deterministic(self) -> None:
        findings = [finding("medium"), finding("critical"), finding("low")]
        self.assertEqual(aggregate(findings), aggregate(list(reversed(findings))))


if __name__ == "__main__":
    unittest.main()
