from django.utils import timezone


class SystemClock:
    """Current time as integer unix seconds."""

    def now(self):
        return int(timezone.now().timestamp())


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, now=0):
        self._now = int(now)

    def now(self):
        return self._now

    def set(self, now):
        self._now = int(now)

    def advance(self, seconds):
        self._now += int(seconds)
        return self._now
