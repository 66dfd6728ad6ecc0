"""Interfaces between the autofill engine and a live document."""

from typing import Any, Dict, List, Optional, Protocol

from autofill_agent.core.models import SelectOption


class ControlAdapter(Protocol):
    """Protocol for a single form control on the page."""

    key: str

    async def describe(self) -> Dict[str, Any]:
        """Raw attributes: tag, type, name, id, label, styles, size ..."""
        ...

    async def read_value(self) -> str:
        ...

    async def write_value(self, value: str) -> None:
        """Assign the value through the native setter, bypassing framework wrappers."""
        ...

    async def focus(self) -> None:
        ...

    async def list_options(self) -> List[SelectOption]:
        ...

    async def select_option(self, value: str) -> None:
        ...

    async def set_checked(self, checked: bool) -> None:
        ...

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        ...

    async def set_files(self, name: str, media_type: str, data: bytes) -> None:
        ...

    async def is_marked(self) -> bool:
        """Whether a previous run already filled this control."""
        ...

    async def mark(self) -> None:
        ...


class PageAdapter(Protocol):
    """Protocol for the document being filled."""

    async def url(self) -> str:
        ...

    async def query_exists(self, selector: str) -> bool:
        ...

    async def controls(self) -> List[ControlAdapter]:
        """All input, textarea, select and contenteditable controls, including those in child frames."""
        ...


class RadioGroup:
    """
    ControlAdapter over the radio inputs that share a name.

    Each member is exposed as one option. Selecting an option checks that
    member; events and the fill marker then go to the checked member.
    """

    def __init__(self, key: str, name: str = ""):
        self.key = key
        self.name = name
        self.members: List[Any] = []
        self.options: List[SelectOption] = []
        self._selected: Optional[int] = None

    def add(self, control, value: str, label: str):
        # Members without a distinct value attribute are addressed by their label.
        if not value or value == "on" or any(o.value == value for o in self.options):
            value = label or str(len(self.options))
        self.members.append(control)
        self.options.append(SelectOption(value=value, text=label))

    @property
    def _target(self):
        return self.members[self._selected if self._selected is not None else 0]

    async def describe(self) -> Dict[str, Any]:
        return await self._target.describe()

    async def read_value(self) -> str:
        return self.options[self._selected].value if self._selected is not None else ""

    async def write_value(self, value: str) -> None:
        await self.select_option(value)

    async def focus(self) -> None:
        await self._target.focus()

    async def list_options(self) -> List[SelectOption]:
        return list(self.options)

    async def select_option(self, value: str) -> None:
        for index, option in enumerate(self.options):
            if option.value == value:
                await self.members[index].set_checked(True)
                self._selected = index
                return
        raise ValueError(f"Radio group '{self.name or self.key}' has no option '{value}'")

    async def set_checked(self, checked: bool) -> None:
        await self._target.set_checked(checked)
        if checked and self._selected is None:
            self._selected = 0

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        await self._target.dispatch_event(event_type, init)

    async def set_files(self, name: str, media_type: str, data: bytes) -> None:
        raise ValueError("Radio groups do not accept files")

    async def is_marked(self) -> bool:
        for member in self.members:
            if await member.is_marked():
                return True
        return False

    async def mark(self) -> None:
        await self._target.mark()
