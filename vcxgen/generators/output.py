# SPDX-License-Identifier: MIT
"""Write-if-changed file output.

Every generated artifact goes through overwrite_if_different(): a file
whose content would not change is left alone, so its modification time
is preserved and incremental build watchers see nothing. Changed files
are written to a temporary sibling and moved into place, so a failed
write never leaves a truncated file behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from vcxgen.core.errors import DocumentWriteError

logger = logging.getLogger(__name__)

EOL_UNIX = "\n"
EOL_WINDOWS = "\r\n"


def overwrite_if_different(path: Path | str, data: bytes) -> bool:
    """Write data to path unless the file already holds exactly that.

    Args:
        path: Destination file. Missing parent folders are created.
        data: The complete new content.

    Returns:
        True if the file was written, False if it was already identical.

    Raises:
        DocumentWriteError: If the file cannot be read or written.
    """
    path = Path(path)
    try:
        if path.is_file() and path.read_bytes() == data:
            return False

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise DocumentWriteError("failed to write file", path=path, cause=e) from e
    return True


class OutputFile:
    """A text file that is collected in memory and committed in one go.

    Lines are written with "\\n"; commit() converts them to the file's
    line ending and encodes as UTF-8.

    Example:
        out = OutputFile(Path("Builds/Gain.sln"), EOL_WINDOWS)
        out.write("Global\\n")
        changed = out.commit()
    """

    def __init__(self, path: Path | str, eol: str = EOL_UNIX) -> None:
        self.path = Path(path)
        self.eol = eol
        self._parts: list[str] = []

    def write(self, text: str) -> None:
        self._parts.append(text)

    @property
    def text(self) -> str:
        """The collected text with the file's line endings applied."""
        text = "".join(self._parts)
        if self.eol != EOL_UNIX:
            text = text.replace("\r\n", "\n").replace("\n", self.eol)
        return text

    def commit(self) -> bool:
        """Write the file if its content changed.

        Returns:
            True if the file was written, False if it was unchanged.
        """
        changed = overwrite_if_different(self.path, self.text.encode("utf-8"))
        if changed:
            logger.info("Wrote %s", self.path)
        else:
            logger.debug("Unchanged %s", self.path)
        return changed
