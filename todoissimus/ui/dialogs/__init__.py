from .base import open_dialog
from .task_dialogs import TaskDialogs
