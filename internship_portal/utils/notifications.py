"""
Notification Sink

Fire-and-forget channel for success and error toasts. The portal never reads
anything back from it.
"""

from abc import ABC, abstractmethod
from typing import Literal

import structlog
from pydantic import BaseModel
from rich.console import Console

logger = structlog.get_logger(__name__)

Variant = Literal["default", "destructive"]


class Toast(BaseModel):
    title: str
    description: str
    variant: Variant = "default"


class Notifier(ABC):
    """Interface for the toast sink."""

    @abstractmethod
    def notify(self, toast: Toast) -> None:
        """Deliver a toast. Must not raise."""

    def success(self, title: str, description: str) -> None:
        self.notify(Toast(title=title, description=description))

    def error(self, title: str, description: str) -> None:
        self.notify(Toast(title=title, description=description, variant="destructive"))


class ConsoleNotifier(Notifier):
    """Prints toasts to the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def notify(self, toast: Toast) -> None:
        if toast.variant == "destructive":
            self.console.print(f"[red][X] {toast.title}:[/red] {toast.description}")
        else:
            self.console.print(f"[green][+] {toast.title}:[/green] {toast.description}")
        logger.debug("toast_delivered", title=toast.title, variant=toast.variant)


class RecordingNotifier(Notifier):
    """Keeps every toast in memory."""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def notify(self, toast: Toast) -> None:
        self.toasts.append(toast)

    @property
    def last(self) -> Toast | None:
        return self.toasts[-1] if self.toasts else None
