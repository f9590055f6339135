from __future__ import annotations

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789abcdef"
URL_SECRET = "test-url-secret-0123456789abcdef0123456789abcdef"
PASSWORD = "correct horse battery staple"
EMAIL = "ada@example.com"


class FakeClock:
    """Callable epoch clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
