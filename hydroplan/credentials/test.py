"""Tests for credential pool and selector."""

import threading

import pytest

from .lib import CredentialPool, CredentialSelector, ExhaustedCredentialsError


@pytest.fixture
def pool(manual_clock) -> CredentialPool:
    return CredentialPool(["key-a", "key-b", "key-c"], clock=manual_clock)


class TestCredentialPool:
    """Tests for pool construction and failure tracking."""

    @pytest.mark.unit
    def test_empty_rejected(self):
        """A pool needs at least one credential."""
        with pytest.raises(ValueError, match="At least one"):
            CredentialPool([])

    @pytest.mark.unit
    def test_blank_rejected(self):
        """Blank strings do not count as credentials."""
        with pytest.raises(ValueError):
            CredentialPool(["", "   "])

    @pytest.mark.unit
    def test_duplicates_collapsed(self):
        """Duplicate keys are collapsed, keeping first-seen order."""
        pool = CredentialPool(["b", "a", "b"])
        assert len(pool) == 2
        assert "a" in pool

    @pytest.mark.unit
    def test_mark_unknown_raises(self, pool):
        """Marking a credential outside the pool is an error."""
        with pytest.raises(KeyError):
            pool.mark_failed("nope")

    @pytest.mark.unit
    def test_reset_clears_failed(self, pool):
        """Reset makes a failed credential selectable again."""
        pool.mark_failed("key-a")
        pool.reset("key-a")
        assert not pool.snapshot()[0].failed

    @pytest.mark.unit
    def test_reset_unknown_raises(self, pool):
        """Resetting an unknown credential is an error."""
        with pytest.raises(KeyError):
            pool.reset("nope")

    @pytest.mark.unit
    def test_snapshot_masks_keys(self):
        """Snapshots never expose full keys."""
        pool = CredentialPool(["AIzaSyExampleKey123"])
        assert pool.snapshot()[0].label == "AIzaSyEx..."


class TestCredentialSelector:
    """Tests for round-robin selection and rate limiting."""

    @pytest.mark.unit
    def test_round_robin_each_once(self, pool):
        """N healthy credentials are each returned once in N selections."""
        selector = CredentialSelector(pool)
        assert [selector.select_credential() for _ in range(3)] == [
            "key-a",
            "key-b",
            "key-c",
        ]
        assert selector.select_credential() == "key-a"

    @pytest.mark.unit
    def test_failed_skipped(self, pool):
        """Failed credentials are skipped."""
        selector = CredentialSelector(pool)
        pool.mark_failed("key-a")
        assert selector.select_credential() == "key-b"
        assert selector.select_credential() == "key-c"
        assert selector.select_credential() == "key-b"

    @pytest.mark.unit
    def test_rate_ceiling_and_window_reset(self, manual_clock):
        """A key at its ceiling is skipped until its window expires."""
        pool = CredentialPool(["only"], clock=manual_clock)
        selector = CredentialSelector(pool, rate_limit=2, window=60.0)

        selector.select_credential()
        selector.select_credential()
        with pytest.raises(ExhaustedCredentialsError):
            selector.select_credential()

        # Window resets only once strictly more than `window` has elapsed
        manual_clock.advance(60.0)
        with pytest.raises(ExhaustedCredentialsError):
            selector.select_credential()

        manual_clock.advance(0.5)
        assert selector.select_credential() == "only"
        assert pool.snapshot()[0].request_count == 1

    @pytest.mark.unit
    def test_rate_limited_key_skipped_for_next(self, manual_clock):
        """A rate-limited key yields to the next healthy one."""
        pool = CredentialPool(["a", "b"], clock=manual_clock)
        selector = CredentialSelector(pool, rate_limit=1)
        assert selector.select_credential() == "a"
        assert selector.select_credential() == "b"
        with pytest.raises(ExhaustedCredentialsError):
            selector.select_credential()

    @pytest.mark.unit
    def test_all_failed_then_cooldown_heals(self, pool, manual_clock):
        """All failed raises; after the cooldown selection succeeds again."""
        selector = CredentialSelector(pool)
        for key in ("key-a", "key-b", "key-c"):
            pool.mark_failed(key)

        with pytest.raises(ExhaustedCredentialsError, match="failed or rate limited"):
            selector.select_credential()

        manual_clock.advance(pool.cooldown - 1)
        with pytest.raises(ExhaustedCredentialsError):
            selector.select_credential()

        manual_clock.advance(1)
        assert selector.select_credential() in ("key-a", "key-b", "key-c")
        assert not any(status.failed for status in pool.snapshot())

    @pytest.mark.unit
    def test_partial_failure_does_not_arm_reset(self, pool, manual_clock):
        """Cooldown applies only when every credential has failed."""
        pool.mark_failed("key-a")
        manual_clock.advance(pool.cooldown * 2)
        assert pool.snapshot()[0].failed

    @pytest.mark.unit
    def test_failure_after_due_reset_sticks(self, pool, manual_clock):
        """A key failed after the cooldown elapsed stays failed."""
        for key in ("key-a", "key-b", "key-c"):
            pool.mark_failed(key)
        manual_clock.advance(pool.cooldown)

        pool.mark_failed("key-b")

        assert [status.failed for status in pool.snapshot()] == [False, True, False]

    @pytest.mark.unit
    def test_last_used_recorded(self, pool, manual_clock):
        """Selection records the clock time."""
        manual_clock.advance(5)
        CredentialSelector(pool).select_credential()
        assert pool.snapshot()[0].last_used == manual_clock()

    @pytest.mark.unit
    def test_invalid_rate_limit(self, pool):
        """A rate limit below one is rejected."""
        with pytest.raises(ValueError):
            CredentialSelector(pool, rate_limit=0)

    @pytest.mark.unit
    def test_concurrent_selection_respects_ceiling(self, manual_clock):
        """Concurrent threads never exceed the per-window ceiling."""
        pool = CredentialPool(["a", "b"], clock=manual_clock)
        selector = CredentialSelector(pool, rate_limit=50)
        selected: list[str] = []
        errors: list[Exception] = []

        def worker():
            for _ in range(40):
                try:
                    selected.append(selector.select_credential())
                except ExhaustedCredentialsError as e:
                    errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(selected) == 100
        assert len(errors) == 60
        assert selected.count("a") == 50
        assert selected.count("b") == 50
