"""Workers periódicos agendados pelo servidor."""

from app.workers.reading_widgets import ReadingWidgetsWorker
from app.workers.scheduler import WorkerScheduler
from app.workers.timer import TimerWorker

__all__ = ["ReadingWidgetsWorker", "TimerWorker", "WorkerScheduler"]
