"""Tests for the difference resolver."""

from account_recon.reconciliation.resolver import resolve


class TestResolve:
    """Tests for resolve()."""

    def test_balanced(self):
        resolution = resolve(46500, 46500)

        assert resolution.difference_cents == 0
        assert resolution.is_balanced
        assert resolution.adjustment_cents == 0

    def test_difference_is_actual_minus_computed(self):
        resolution = resolve(46500, 47000)

        assert resolution.difference_cents == 500
        assert not resolution.is_balanced
        assert resolution.adjustment_cents == 500

    def test_negative_difference(self):
        resolution = resolve(46500, 46499)

        assert resolution.difference_cents == -1
        assert not resolution.is_balanced

    def test_one_cent_is_not_balanced(self):
        """Exact equality, no tolerance."""
        assert not resolve(0, 1).is_balanced

    def test_same_inputs_same_result(self):
        assert resolve(-12345, 6789) == resolve(-12345, 6789)
