import pytest

from sample_app.services import work


@pytest.mark.parametrize(("n", "expected"), [(0, 0), (1, 1), (2, 1), (10, 55), (25, 75025)])
def test_fibonacci_values(n: int, expected: int) -> None:
    assert work.fibonacci(n) == expected


def test_fibonacci_uses_naive_double_recursion(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = 0
    original = work.fibonacci

    def counting(n: int) -> int:
        nonlocal calls
        calls += 1
        return original(n)

    # Recursive calls resolve the module global, so every call goes through the counter.
    monkeypatch.setattr(work, "fibonacci", counting)

    assert work.fibonacci(10) == 55
    # Naive recursion makes 2 * fib(n + 1) - 1 calls; fib(11) == 89.
    assert calls == 177
