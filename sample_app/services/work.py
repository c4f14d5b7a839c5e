from __future__ import annotations


def fibonacci(n: int) -> int:
    """Naive doubly-recursive Fibonacci.

    Exponential on purpose: /api/work uses it to burn CPU.
    """

    if n <= 1:
        return n
    return fibonacci(n - 1) + fibonacci(n - 2)
