from .timer_widget import TimerWidget
from .history_widget import HistoryWidget

__all__ = ["TimerWidget", "HistoryWidget"]
