"""
multipart/form-data encoding for file-bearing requests.

Parameter records are flattened with ``as_params``; fields named in
``FILE_FIELDS`` hold local paths whose contents are attached as file parts,
everything else is sent as a text part.
"""

import io
import json
import os
import shutil
import uuid
from typing import Any

from oai_cli.core.types import as_params

FILE_FIELDS = frozenset({"image", "mask", "file"})

FILE_CONTENT_TYPE = "application/octet-stream"
CRLF = b"\r\n"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def form_value(value: Any) -> str:
    """Render a parameter value as the text of a form part."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, (bool, list, tuple, dict)):
        return json.dumps(value)
    return str(value)


class MultipartWriter:
    """Writes form parts into a byte buffer separated by a random boundary."""

    def __init__(self, buffer: io.BytesIO, boundary: str | None = None):
        self._buffer = buffer
        self.boundary = boundary or uuid.uuid4().hex
        self._closed = False

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def _begin_part(self, headers: list[str]) -> None:
        self._buffer.write(f"--{self.boundary}".encode() + CRLF)
        for header in headers:
            self._buffer.write(header.encode("utf-8") + CRLF)
        self._buffer.write(CRLF)

    def write_field(self, name: str, value: str) -> None:
        """Write a plain text part."""
        self._begin_part([f'Content-Disposition: form-data; name="{_quote(name)}"'])
        self._buffer.write(value.encode("utf-8"))
        self._buffer.write(CRLF)

    def write_file(self, name: str, path: str) -> None:
        """Write a file part named after ``name`` with the contents of ``path``."""
        # opened before any part bytes are written
        with open(path, "rb") as source:
            self._begin_part(
                [
                    f'Content-Disposition: form-data; name="{_quote(name)}"; '
                    f'filename="{_quote(os.path.basename(path))}"',
                    f"Content-Type: {FILE_CONTENT_TYPE}",
                ]
            )
            shutil.copyfileobj(source, self._buffer)
        self._buffer.write(CRLF)

    def close(self) -> None:
        """Write the closing boundary."""
        if not self._closed:
            self._buffer.write(f"--{self.boundary}--".encode() + CRLF)
            self._closed = True


def encode_multipart(params: Any, boundary: str | None = None) -> tuple[bytes, str]:
    """
    Encode a parameter record as multipart/form-data.

    Args:
        params: Params dataclass or mapping
        boundary: Boundary override (random when omitted)

    Returns:
        Tuple of (body bytes, content type including the boundary)

    Raises:
        OSError: If a file field names a path that cannot be read

    """
    buffer = io.BytesIO()
    writer = MultipartWriter(buffer, boundary)

    for name, value in as_params(params).items():
        text = form_value(value)
        if name in FILE_FIELDS and text:
            writer.write_file(name, text)
            continue
        writer.write_field(name, text)

    writer.close()
    return buffer.getvalue(), writer.content_type
