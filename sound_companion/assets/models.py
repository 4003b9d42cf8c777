"""
Data models for local and remote sounds

Asset is the join key between the local sounds directory and the remote
catalog: two assets are the same sound when their file names match, wherever
they live.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..utils.helpers import display_name

# Suffix of a download still in progress; never a sound on its own
PARTIAL_SUFFIX = ".part"


@dataclass(frozen=True)
class Asset:
    """
    A sound file stored in the local sounds directory

    Attributes:
        file_name: File name inside the sounds directory (case-significant, immutable)
        directory: Directory the file lives in; not part of equality

    Equality and hashing only consider file_name, so local and remote
    inventories can be compared with plain set operations.
    """
    file_name: str
    directory: Path = field(default=Path("."), compare=False)

    @property
    def path(self) -> Path:
        """Full path of the sound file"""
        return Path(self.directory) / self.file_name

    @property
    def name(self) -> str:
        """Human-readable name (file name without extension)"""
        return display_name(self.file_name)

    def exists(self) -> bool:
        return self.path.is_file()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RemoteAssetDescriptor:
    """
    A sound offered by the remote catalog

    Attributes:
        file_name: File name the sound is stored under locally
        url: Absolute URL the sound's bytes are fetched from
    """
    file_name: str
    url: str

    @property
    def name(self) -> str:
        return display_name(self.file_name)


@dataclass
class RemoteListing:
    """
    Result of listing the remote catalog

    Attributes:
        success: False when the listing could not be fetched or parsed
        assets: Descriptors in catalog order (empty on failure)
        error: Reason for failure, for logging
    """
    success: bool
    assets: List[RemoteAssetDescriptor] = field(default_factory=list)
    error: str = ""

    @classmethod
    def failed(cls, error: str) -> 'RemoteListing':
        return cls(success=False, assets=[], error=error)

    @property
    def file_names(self) -> List[str]:
        return [descriptor.file_name for descriptor in self.assets]
