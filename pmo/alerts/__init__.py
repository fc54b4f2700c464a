from .sound_manager import SoundManager
from .notifier import DesktopNotifier, completion_message

__all__ = ["SoundManager", "DesktopNotifier", "completion_message"]
