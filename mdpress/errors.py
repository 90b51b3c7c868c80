"""Error hierarchy for mdpress.

Every error carries the file path or content-type name it originated from so
the command line can report it without extra context:

    SiteError
    ├── ConfigError
    ├── DiscoveryError
    │   └── MissingMetadata
    ├── MetadataError
    ├── LoadError
    ├── TemplateError
    ├── ArtifactError
    └── WriteError
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class SiteError(Exception):
    """Base class for all build errors."""

    def __init__(self, message: str, path: Optional[PathLike] = None) -> None:
        self.message = message
        self.path = str(path) if path is not None else None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigError(SiteError):
    pass


class DiscoveryError(SiteError):
    pass


class MissingMetadata(DiscoveryError):
    """A content file has no metadata file next to it."""


class MetadataError(SiteError):
    pass


class LoadError(SiteError):
    """Reading, converting or highlighting a single item failed."""


class TemplateError(SiteError):
    pass


class ArtifactError(SiteError):
    pass


class WriteError(SiteError):
    pass
