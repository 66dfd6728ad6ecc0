"""Handles file upload actions from stored base64 documents."""
import base64
import binascii

from .base_handler import BaseActionHandler
from autofill_agent.core.exceptions import UploadError
from autofill_agent.tools.constants import DEFAULT_UPLOAD_NAME, DEFAULT_UPLOAD_TYPE

UPLOAD_EVENTS = ("change", "input")


def decode_document(document) -> bytes:
    """Decode a stored document's base64 payload, accepting a data: URL prefix."""
    data = document.data or ""
    if data.startswith("data:"):
        _, _, data = data.partition(",")
    data = "".join(data.split())
    try:
        payload = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UploadError(f"Stored document '{document.name}' is not valid base64") from e
    if not payload:
        raise UploadError(f"Stored document '{document.name}' is empty")
    return payload


class FileUploadHandler(BaseActionHandler):
    """Attaches a stored document to a file input as a synthetic file."""

    async def execute(self, context) -> bool:
        descriptor = context.descriptor
        document = context.document
        if document is None:
            raise UploadError(f"No document supplied for '{descriptor.display_name}'")

        payload = decode_document(document)
        name = document.name or DEFAULT_UPLOAD_NAME
        media_type = document.media_type or DEFAULT_UPLOAD_TYPE

        self.logger.info(f"Uploading '{name}' ({len(payload)} bytes) to '{descriptor.display_name}'")
        try:
            await descriptor.control.set_files(name, media_type, payload)
            await self._dispatch(descriptor.control, UPLOAD_EVENTS)
        except Exception as e:
            raise UploadError(f"Could not attach '{name}' to '{descriptor.display_name}': {e}") from e

        await self._pause(self.timings.post_upload_delay)
        return True
