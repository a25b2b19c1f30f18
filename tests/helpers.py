"""Test doubles shared across unit, integration and adversarial tests."""

import threading
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class RecordingGateway:
    """NotificationGateway that records deliveries and can be told to fail."""

    def __init__(self, accept: bool = True, error: Exception | None = None) -> None:
        self.accept = accept
        self.error = error
        self.sent: list[tuple[str, str]] = []

    def deliver(self, destination: str, code: str) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((destination, code))
        return self.accept

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


class BlockingGateway(RecordingGateway):
    """RecordingGateway that holds every delivery until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()
        self.finished = threading.Event()

    def deliver(self, destination: str, code: str) -> bool:
        self.entered.set()
        self.release.wait(timeout=5)
        try:
            return super().deliver(destination, code)
        finally:
            self.finished.set()


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def scripted_codes(*codes: str) -> Callable[[], str]:
    """Code generator returning the given codes in order, then '000000'."""
    remaining: Iterator[str] = iter(codes)
    return lambda: next(remaining, "000000")


def register(service, email: str = "victim@example.com", password: str = "Victim123"):
    """Sign up an account with a phone number through a VerificationService."""
    return service.sign_up(
        first_name="Vic",
        last_name="Tim",
        email=email,
        password=password,
        phone_number="+15550001111",
    )
