from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Protocol

from rich.console import Console


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: str = "default"  # "default" | "destructive"


class Notifier(Protocol):
    def toast(self, title: str, description: str, variant: str = "default") -> None: ...


class ConsoleNotifier:
    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def toast(self, title: str, description: str, variant: str = "default") -> None:
        style = "red" if variant == "destructive" else "green"
        self.console.print(f"[{style}]{title}[/]: {description}")


class RecordingNotifier:
    """Keeps toasts in memory instead of showing them."""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def toast(self, title: str, description: str, variant: str = "default") -> None:
        self.toasts.append(Toast(title, description, variant))

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None


@dataclass
class Navigator:
    current: str = "/dashboard"
    history: list[str] = field(default_factory=list)

    def navigate(self, route: str) -> None:
        self.history.append(self.current)
        self.current = route
