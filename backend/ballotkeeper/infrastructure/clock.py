"""System clock — unix-second timestamps for election window checks."""

import time


class SystemClock:
    def now(self) -> int:
        return int(time.time())
