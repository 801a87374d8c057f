from datetime import datetime, timedelta, timezone


class TickingClock:
    """Returns a later instant on every call."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now
