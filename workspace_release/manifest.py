"""package.json reading and writing.

Manifests are rewritten in place during a release, so the serialized form
must look like the file the user committed: same indentation, same line
endings, same trailing whitespace. Only the JSON values are allowed to
change.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from .errors import ManifestNotFoundError, ManifestParseError
from .logging import get_logger

log = get_logger(__name__)

DEFAULT_INDENT = "  "
INDENT_RE = re.compile(r"^(?:\t|[ ]+)", re.MULTILINE)


def detect_newline(text: str) -> str:
    """Return the dominant line ending of ``text``.

    Falls back to ``"\\n"`` when the text has no line breaks at all.
    """
    crlf = text.count("\r\n")
    lf = text.count("\n") - crlf
    return "\r\n" if crlf > lf else "\n"


def detect_indent(text: str) -> str:
    """Return the indentation used by the first indented line of ``text``.

    Lines made only of whitespace are ignored. A tab-indented file yields a
    single tab; a minified file yields an empty string.
    """
    for match in INDENT_RE.finditer(text):
        line_end = text.find("\n", match.end())
        rest = text[match.end() : line_end if line_end != -1 else len(text)]
        if rest.strip():
            indent = match.group(0)
            return "\t" if indent.startswith("\t") else indent
    return ""


class ManifestFile:
    """A package.json loaded together with its formatting metadata.

    Attributes:
        path: Location of the file on disk.
        data: The parsed manifest. Mutate it and call :meth:`write`.
        line_endings: ``"\\n"`` or ``"\\r\\n"``.
        indent: Indentation string of one nesting level.
        trailing_whitespace: Whitespace found after the closing brace.
    """

    def __init__(
        self,
        path: Path,
        data: dict[str, Any],
        *,
        line_endings: str = "\n",
        indent: str = DEFAULT_INDENT,
        trailing_whitespace: str = "",
    ) -> None:
        self.path = path
        self.data = data
        self.line_endings = line_endings
        self.indent = indent
        self.trailing_whitespace = trailing_whitespace

    @classmethod
    def load(cls, path: Path | str) -> ManifestFile:
        """Read and parse a package.json, capturing how it is formatted.

        Raises:
            ManifestNotFoundError: If the file does not exist.
            ManifestParseError: If it is not a JSON object.
        """
        path = Path(path)
        try:
            # Read bytes so "\r\n" survives universal newline translation.
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise ManifestNotFoundError(f"No package.json found at {path}") from exc

        try:
            contents = raw.decode("utf-8")
            data = json.loads(contents)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestParseError(f"Failed to parse {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ManifestParseError(f"{path} is not a JSON object")

        return cls(
            path,
            data,
            line_endings=detect_newline(contents),
            indent=detect_indent(contents),
            trailing_whitespace=contents[len(contents.rstrip()) :],
        )

    @property
    def indent_width(self) -> int:
        return len(self.indent)

    @property
    def name(self) -> str | None:
        return self.data.get("name")

    @property
    def version(self) -> str | None:
        return self.data.get("version")

    def dumps(self) -> str:
        """Serialize :attr:`data` the way the original file was laid out."""
        if self.indent:
            text = json.dumps(self.data, indent=self.indent, ensure_ascii=False)
        else:
            text = json.dumps(self.data, separators=(",", ":"), ensure_ascii=False)
        return text.replace("\n", self.line_endings) + self.trailing_whitespace

    def write(self) -> None:
        """Overwrite the file on disk with the current :attr:`data`."""
        with open(self.path, "w", encoding="utf-8", newline="") as fh:
            fh.write(self.dumps())
        log.debug("manifest_written", path=str(self.path))
