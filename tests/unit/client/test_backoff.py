import pytest

from openrouter_structured.client.backoff import RetryBudget, compute_backoff

pytestmark = pytest.mark.unit


def zero():
    return 0.0


def almost_one():
    return 0.999


@pytest.mark.parametrize(
    ("attempt", "expected"), [(0, 1000), (1, 2000), (2, 4000), (3, 8000), (4, 10000)]
)
def test_exponential_growth_capped_at_max(attempt, expected):
    assert compute_backoff(attempt, 1000, 10000, rng=zero) == expected


def test_jitter_adds_up_to_half_a_second():
    assert compute_backoff(0, 1000, 10000, rng=almost_one) == pytest.approx(1499.5)


def test_jitter_never_exceeds_cap():
    assert compute_backoff(10, 1000, 10000, rng=almost_one) == 10000


def test_default_rng_stays_in_range():
    for _ in range(50):
        assert 1000 <= compute_backoff(0) < 1500


class TestRetryBudget:
    def test_from_retries_counts_first_attempt(self):
        assert RetryBudget.from_retries(2).max_attempts == 3
        assert RetryBudget.from_retries(0).max_attempts == 1

    def test_negative_retries_still_allow_one_attempt(self):
        assert RetryBudget.from_retries(-3).max_attempts == 1

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError, match="at least 1"):
            RetryBudget(max_attempts=0)

    def test_inter_attempt_delay_uses_regular_base(self):
        budget = RetryBudget(max_attempts=3)

        assert budget.inter_attempt_delay(0, zero) == 1000
        assert budget.inter_attempt_delay(1, zero) == 2000

    def test_rate_limit_delay_uses_larger_base_and_cap(self):
        budget = RetryBudget(max_attempts=3)

        assert budget.rate_limit_delay(0, zero) == 5000
        assert budget.rate_limit_delay(1, zero) == 10000
        assert budget.rate_limit_delay(5, zero) == 30000

    def test_custom_delays(self):
        budget = RetryBudget(max_attempts=2, base_delay_ms=10, max_delay_ms=15)

        assert budget.inter_attempt_delay(0, zero) == 10
        assert budget.inter_attempt_delay(1, zero) == 15
