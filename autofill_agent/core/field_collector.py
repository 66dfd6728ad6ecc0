"""Collection of fillable controls from the current document."""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Union

from autofill_agent.core.control_adapter import RadioGroup
from autofill_agent.core.models import FieldDescriptor
from autofill_agent.tools.constants import COLLECT_ATTEMPTS, COLLECT_RETRY_DELAY

logger = logging.getLogger(__name__)

SKIPPED_INPUT_TYPES = {"submit", "button", "reset", "image", "hidden"}
_LABEL_SUFFIX = re.compile(r"\s*(\*|\(optional\)|\(required\))\s*$", re.IGNORECASE)


def clean_label(text: Optional[str]) -> str:
    """Collapse whitespace and strip required/optional markers from label text."""
    cleaned = re.sub(r"\s+", " ", text or "").strip()
    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = _LABEL_SUFFIX.sub("", cleaned).strip()
    return cleaned


def is_visible(attrs: Dict[str, Any]) -> bool:
    if attrs.get("display") == "none" or attrs.get("visibility") == "hidden":
        return False
    try:
        if float(attrs.get("opacity", 1)) == 0:
            return False
    except (TypeError, ValueError):
        pass
    width = attrs.get("width") or 0
    height = attrs.get("height") or 0
    return bool(width or height)


class _PendingGroup:
    """A radio group whose members are still being collected."""

    def __init__(self, group: RadioGroup, attrs: Dict[str, Any]):
        self.group = group
        self.attrs = attrs
        self.visible = False


class FieldCollector:
    """Builds FieldDescriptors for every fillable control on a page."""

    def __init__(self, page):
        self.page = page
        self.logger = logging.getLogger(__name__)

    async def collect(self, include_hidden: bool = False) -> List[FieldDescriptor]:
        """
        Enumerate fillable controls in document order.

        Radio inputs sharing a name become one descriptor of kind ``radio``
        placed where the first member appears.

        Args:
            include_hidden: Keep controls that are not rendered

        Returns:
            Descriptors for visible controls plus every file input
        """
        entries: List[Union[FieldDescriptor, _PendingGroup]] = []
        groups: Dict[str, _PendingGroup] = {}

        for control in await self.page.controls():
            try:
                attrs = await control.describe()
            except Exception as e:
                self.logger.warning(f"Could not describe control {getattr(control, 'key', '?')}: {e}")
                continue

            if (attrs.get("type") or "").lower() == "radio":
                group_key = attrs.get("name") or control.key
                pending = groups.get(group_key)
                if pending is None:
                    pending = _PendingGroup(RadioGroup(f"radio:{group_key}", attrs.get("name") or ""), attrs)
                    groups[group_key] = pending
                    entries.append(pending)
                pending.group.add(control, attrs.get("value") or "", clean_label(attrs.get("label")))
                pending.visible = pending.visible or is_visible(attrs)
                continue

            descriptor = self._build_descriptor(control, attrs)
            if descriptor is not None:
                entries.append(descriptor)

        descriptors: List[FieldDescriptor] = []
        for entry in entries:
            if isinstance(entry, _PendingGroup):
                entry = self._build_group_descriptor(entry)
            if not entry.visible and entry.kind != "file" and not include_hidden:
                continue
            descriptors.append(entry)

        self.logger.info(f"Collected {len(descriptors)} fillable fields")
        return descriptors

    async def collect_with_retry(self, attempts: int = COLLECT_ATTEMPTS, delay: float = COLLECT_RETRY_DELAY,
                                 include_hidden: bool = False) -> List[FieldDescriptor]:
        """
        Collect fields, waiting and trying again while the page shows none.

        Args:
            attempts: Maximum number of collection passes
            delay: Seconds to wait between passes
            include_hidden: Keep controls that are not rendered

        Returns:
            Descriptors from the first pass that found any, else an empty list
        """
        attempts = max(1, attempts)
        for attempt in range(1, attempts + 1):
            descriptors = await self.collect(include_hidden)
            if descriptors:
                return descriptors
            if attempt < attempts:
                self.logger.info(f"No fields found (attempt {attempt}/{attempts}), waiting for the form to render")
                if delay > 0:
                    await asyncio.sleep(delay)
        self.logger.warning(f"No fillable fields found after {attempts} attempts")
        return []

    def _build_descriptor(self, control, attrs: Dict[str, Any]) -> Optional[FieldDescriptor]:
        tag = (attrs.get("tag") or "input").lower()
        input_type = (attrs.get("type") or "").lower()

        if attrs.get("contenteditable"):
            kind = "contenteditable"
            input_type = "textarea"
        elif tag == "select":
            kind = "select"
            input_type = input_type or "select-one"
        elif tag == "textarea":
            kind = "textarea"
            input_type = "textarea"
        else:
            input_type = input_type or "text"
            if input_type in SKIPPED_INPUT_TYPES:
                return None
            kind = "file" if input_type == "file" else "input"

        return FieldDescriptor(
            control=control,
            kind=kind,
            input_type=input_type,
            name=attrs.get("name") or "",
            id=attrs.get("id") or "",
            placeholder=attrs.get("placeholder") or "",
            label=clean_label(attrs.get("label")),
            aria_label=clean_label(attrs.get("aria_label")),
            test_id=attrs.get("test_id") or "",
            automation_id=attrs.get("automation_id") or "",
            title=attrs.get("title") or "",
            class_name=attrs.get("class_name") or "",
            accept=attrs.get("accept") or "",
            role=attrs.get("role") or "",
            autocomplete=attrs.get("autocomplete") or "",
            section=clean_label(attrs.get("section")),
            visible=is_visible(attrs),
        )

    @staticmethod
    def _build_group_descriptor(pending: _PendingGroup) -> FieldDescriptor:
        # The question is the group's legend; each member's own label is an answer.
        attrs = pending.attrs
        section = clean_label(attrs.get("section"))
        return FieldDescriptor(
            control=pending.group,
            kind="radio",
            input_type="radio",
            name=attrs.get("name") or "",
            label=clean_label(attrs.get("group_label")) or section,
            test_id=attrs.get("test_id") or "",
            automation_id=attrs.get("automation_id") or "",
            section=section,
            visible=pending.visible,
        )
