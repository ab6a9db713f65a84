from __future__ import annotations

import base64
import io
import zipfile
from pathlib import Path
from typing import Any

from .command import Command, Name


class FileDetector:
    """Decides whether keys typed into an element name a local file.

    The default implementation never does and returns the text unchanged.
    """

    def handle_file(self, driver: Any, text: str) -> str:
        return text


class LocalFileDetector(FileDetector):
    """Uploads local files to the remote end and types the remote path instead."""

    def handle_file(self, driver: Any, text: str) -> str:
        path = Path(text)
        try:
            if not path.is_file():
                return text
        except (OSError, ValueError):
            # Not a usable path; send the keys as typed.
            return text

        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as archive:
            archive.write(path, arcname=path.name)
        encoded = base64.b64encode(buf.getvalue()).decode("ascii")
        return driver.execute(Command(Name.UPLOAD_FILE).set_parameter("file", encoded))
