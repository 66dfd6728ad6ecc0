"""Playwright implementation of the page and control adapters."""

import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import ElementHandle, Error, Page

from autofill_agent.core.exceptions import ElementNotFoundError
from autofill_agent.core.models import SelectOption
from autofill_agent.tools.constants import AUTOFILL_MARKER

logger = logging.getLogger(__name__)

CONTROL_SELECTOR = 'input, textarea, select, [contenteditable="true"]'

DESCRIBE_SCRIPT = """
(el) => {
    const style = window.getComputedStyle(el);
    const rect = el.getBoundingClientRect();
    const text = (node) => (node ? node.textContent.trim() : '');

    let label = '';
    if (el.labels && el.labels.length) label = text(el.labels[0]);
    if (!label && el.id) {
        label = text(document.querySelector(`label[for="${CSS.escape(el.id)}"]`));
    }
    if (!label) label = text(el.closest('label'));
    if (!label) {
        const ids = el.getAttribute('aria-labelledby');
        if (ids) label = ids.split(/\\s+/).map((id) => text(document.getElementById(id))).join(' ');
    }
    if (!label) label = el.getAttribute('data-label') || '';

    let groupLabel = '';
    if (el.type === 'radio') {
        const fieldset = el.closest('fieldset');
        if (fieldset) groupLabel = text(fieldset.querySelector('legend'));
        const group = el.closest('[role="radiogroup"]');
        if (!groupLabel && group) {
            const ids = group.getAttribute('aria-labelledby');
            groupLabel = group.getAttribute('aria-label')
                || (ids ? ids.split(/\\s+/).map((id) => text(document.getElementById(id))).join(' ') : '');
        }
    }

    let section = '';
    let node = el.parentElement;
    for (let depth = 0; node && depth < 6 && !section; depth++) {
        const legend = node.querySelector(':scope > legend, :scope > h1, :scope > h2, :scope > h3, :scope > h4');
        if (legend) section = text(legend);
        else if (node.getAttribute('aria-label')) section = node.getAttribute('aria-label');
        node = node.parentElement;
    }

    return {
        tag: el.tagName.toLowerCase(),
        type: (el.type || '').toLowerCase(),
        name: el.name || '',
        value: typeof el.value === 'string' ? el.value : '',
        id: el.id || '',
        placeholder: el.placeholder || '',
        label: label,
        aria_label: el.getAttribute('aria-label') || '',
        test_id: el.getAttribute('data-testid') || '',
        automation_id: el.getAttribute('data-automation-id') || el.getAttribute('data-qa') || '',
        title: el.title || '',
        class_name: typeof el.className === 'string' ? el.className : '',
        accept: el.getAttribute('accept') || '',
        role: el.getAttribute('role') || '',
        autocomplete: el.getAttribute('aria-autocomplete') || '',
        group_label: groupLabel,
        contenteditable: el.isContentEditable && !['INPUT', 'TEXTAREA', 'SELECT'].includes(el.tagName),
        section: section,
        display: style.display,
        visibility: style.visibility,
        opacity: style.opacity,
        width: rect.width,
        height: rect.height,
    };
}
"""

# Native setter so framework-controlled inputs (React and friends) notice the change.
WRITE_SCRIPT = """
(el, value) => {
    if (el.isContentEditable && !['INPUT', 'TEXTAREA', 'SELECT'].includes(el.tagName)) {
        el.textContent = value;
        return;
    }
    const proto = el.tagName === 'TEXTAREA' ? HTMLTextAreaElement.prototype
        : el.tagName === 'SELECT' ? HTMLSelectElement.prototype
        : HTMLInputElement.prototype;
    const descriptor = Object.getOwnPropertyDescriptor(proto, 'value');
    if (descriptor && descriptor.set) descriptor.set.call(el, value);
    else el.value = value;
    if (el._valueTracker) el._valueTracker.setValue('');
}
"""

READ_SCRIPT = "(el) => (el.isContentEditable && !('value' in el) ? el.textContent : el.value) || ''"
OPTIONS_SCRIPT = "(el) => Array.from(el.options || []).map((o) => ({value: o.value, text: o.text.trim()}))"
IS_MARKED_SCRIPT = f"(el) => el.getAttribute('{AUTOFILL_MARKER}') === 'true'"
MARK_SCRIPT = f"(el) => el.setAttribute('{AUTOFILL_MARKER}', 'true')"


class PlaywrightControl:
    """ControlAdapter backed by a Playwright ElementHandle."""

    def __init__(self, handle: ElementHandle, key: str):
        self.handle = handle
        self.key = key

    async def _call(self, action: str, coro):
        try:
            return await coro
        except Error as e:
            if "not attached" in str(e) or "detached" in str(e):
                raise ElementNotFoundError(f"Control {self.key} is no longer attached ({action})") from e
            raise

    async def describe(self) -> Dict[str, Any]:
        return await self._call("describe", self.handle.evaluate(DESCRIBE_SCRIPT))

    async def read_value(self) -> str:
        return await self._call("read", self.handle.evaluate(READ_SCRIPT))

    async def write_value(self, value: str) -> None:
        await self._call("write", self.handle.evaluate(WRITE_SCRIPT, value))

    async def focus(self) -> None:
        await self._call("focus", self.handle.focus())

    async def list_options(self) -> List[SelectOption]:
        raw = await self._call("options", self.handle.evaluate(OPTIONS_SCRIPT))
        return [SelectOption(value=o["value"], text=o["text"]) for o in raw]

    async def select_option(self, value: str) -> None:
        await self._call("select", self.handle.select_option(value=value))

    async def set_checked(self, checked: bool) -> None:
        await self._call("check", self.handle.set_checked(checked))

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        await self._call("dispatch", self.handle.dispatch_event(event_type, init or {}))

    async def set_files(self, name: str, media_type: str, data: bytes) -> None:
        await self._call("upload", self.handle.set_input_files(
            {"name": name, "mimeType": media_type, "buffer": data}))

    async def is_marked(self) -> bool:
        return bool(await self._call("marker", self.handle.evaluate(IS_MARKED_SCRIPT)))

    async def mark(self) -> None:
        await self._call("mark", self.handle.evaluate(MARK_SCRIPT))


class PlaywrightPage:
    """PageAdapter over a Playwright Page, walking child frames too."""

    def __init__(self, page: Page):
        self.page = page
        self.logger = logging.getLogger(__name__)

    async def url(self) -> str:
        return self.page.url

    async def query_exists(self, selector: str) -> bool:
        return await self.page.query_selector(selector) is not None

    async def controls(self) -> List[PlaywrightControl]:
        controls: List[PlaywrightControl] = []
        for frame_index, frame in enumerate(self.page.frames):
            try:
                handles = await frame.query_selector_all(CONTROL_SELECTOR)
            except Error as e:
                self.logger.debug(f"Skipping frame {frame.url}: {e}")
                continue
            controls.extend(PlaywrightControl(h, f"{frame_index}:{i}") for i, h in enumerate(handles))
        return controls
