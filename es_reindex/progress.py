# progress.py
import inspect


def map_progress(total, completed, start_percent=0, end_percent=100):
    """
    Map a phase-local completion ratio onto [start_percent, end_percent].

    A phase with nothing to do counts as finished.
    """
    if total <= 0:
        return end_percent
    ratio = min(completed / total, 1.0)
    return start_percent + int(round(ratio * (end_percent - start_percent)))


class ProgressTracker:
    """
    Forwards progress to an optional callback (plain or async) as
    ``callback(percent, message)``.
    """

    def __init__(self, callback=None):
        self.callback = callback

    async def emit(self, percent, message=None):
        if self.callback is None:
            return
        result = self.callback(int(percent), message)
        if inspect.isawaitable(result):
            await result

    def phase(self, start_percent, end_percent):
        return PhaseProgress(self, start_percent, end_percent)


class PhaseProgress:
    """Progress for one copy pass; never reports a lower percent than before."""

    def __init__(self, tracker, start_percent, end_percent):
        self.tracker = tracker
        self.start_percent = start_percent
        self.end_percent = end_percent
        self.last_percent = start_percent

    async def report(self, total, completed, message=None):
        percent = max(self.last_percent,
                      map_progress(total, completed, self.start_percent, self.end_percent))
        self.last_percent = percent
        await self.tracker.emit(percent, message)
        return percent

    async def finish(self, message=None):
        self.last_percent = self.end_percent
        await self.tracker.emit(self.end_percent, message)
