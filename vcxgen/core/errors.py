# SPDX-License-Identifier: MIT
"""Custom exceptions for vcxgen.

All vcxgen exceptions inherit from VcxgenError, which carries optional
context (target, configuration, path) so a failure can be diagnosed
from the message alone.
"""

from __future__ import annotations

from pathlib import PurePath


class VcxgenError(Exception):
    """Base class for all vcxgen exceptions.

    Attributes:
        message: The error message.
        target: Name of the target being emitted, if any.
        configuration: Canonical name of the configuration, if any.
        path: The offending path, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        target: str | None = None,
        configuration: str | None = None,
        path: str | PurePath | None = None,
    ) -> None:
        self.message = message
        self.target = target
        self.configuration = configuration
        self.path = str(path) if path is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        context = []
        if self.target:
            context.append(f"target {self.target!r}")
        if self.configuration:
            context.append(f"configuration {self.configuration!r}")
        if self.path:
            context.append(f"path {self.path!r}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ConfigurationError(VcxgenError):
    """Invalid project or exporter configuration.

    Raised before any file is written, e.g. when the target set is empty,
    an output format is unknown, or two configurations collide.
    """


class PathResolutionError(VcxgenError):
    """A path cannot be expressed relative to the target output folder."""


class DocumentWriteError(VcxgenError):
    """Serialization or filesystem failure while flushing an artifact.

    Attributes:
        cause: The underlying exception.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | PurePath,
        cause: BaseException | None = None,
        target: str | None = None,
    ) -> None:
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, target=target, path=path)
