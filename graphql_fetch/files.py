"""
File variables for GraphQL multipart requests.

Files may appear anywhere inside an operation's variables. The extractor
walks the operation, replaces each file with ``None`` in a copy and reports
where every file was found, following the GraphQL multipart request
convention (https://github.com/jaydenseric/graphql-multipart-request-spec).
"""

from __future__ import annotations

import io
import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, List, Mapping, Optional, Tuple, Union

from .protocols import ExtractedFiles


@dataclass(eq=False)
class FileUpload:
    """
    A file to upload as a GraphQL variable.

    Instances compare by identity, so the same upload referenced from two
    variables is sent once and mapped to both paths.
    """

    content: Union[bytes, IO[bytes]]
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> FileUpload:
        """Read a file from disk into an upload."""
        file_path = Path(path)
        return cls(
            content=file_path.read_bytes(),
            filename=file_path.name,
            content_type=content_type
            or mimetypes.guess_type(str(file_path))[0]
            or "application/octet-stream",
        )


def is_file_like(value: Any) -> bool:
    """Check whether a variable value must be sent as a multipart file."""
    return isinstance(value, (FileUpload, io.IOBase))


def _walk(value: Any, path: str, found: List[Tuple[str, Any]]) -> Any:
    # Returns the clone of value and records (path, file) pairs in found.
    if is_file_like(value):
        found.append((path, value))
        return None

    if isinstance(value, Mapping):
        return {
            key: _walk(item, f"{path}.{key}" if path else str(key), found)
            for key, item in value.items()
        }

    if isinstance(value, (list, tuple)):
        return [
            _walk(item, f"{path}.{index}" if path else str(index), found)
            for index, item in enumerate(value)
        ]

    return value


def extract_files(value: Mapping[str, Any]) -> ExtractedFiles:
    """
    Extract file-like values from an operation.

    Args:
        value: Operation in its wire representation
            (``{"query", "variables", "operationName"}``)

    Returns:
        ExtractedFiles whose paths are dotted, e.g. ``variables.files.0``.
        Paths that reference the same file object are grouped together.
    """
    found: List[Tuple[str, Any]] = []
    clone = _walk(value, "", found)

    files: List[Tuple[Any, List[str]]] = []
    for path, file in found:
        for known, paths in files:
            if known is file:
                paths.append(path)
                break
        else:
            files.append((file, [path]))

    return ExtractedFiles(clone=clone, files=files)


def file_field(file: Any) -> Tuple[Any, Optional[str], Optional[str]]:
    """Return ``(payload, filename, content_type)`` for a form field."""
    if isinstance(file, FileUpload):
        return file.content, file.filename, file.content_type

    name = getattr(file, "name", None)
    filename = os.path.basename(name) if isinstance(name, str) else None
    return file, filename, None
