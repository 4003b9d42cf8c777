"""
Sound asset package

- **models**: Asset (local sound), RemoteAssetDescriptor and RemoteListing
- **catalog**: AssetCatalog, the cached view of the sounds directory
- **remote**: RemoteCatalogClient interface and its HTTP implementation
- **bundled**: sounds shipped with the package and their provisioning
"""

from .models import Asset, RemoteAssetDescriptor, RemoteListing
from .catalog import AssetCatalog
from .remote import RemoteCatalogClient, HttpCatalogClient
from .bundled import BUNDLED_SOUNDS, BUNDLED_SOUNDS_PATH, is_bundled, provision_bundled_sounds

__all__ = [
    'Asset',
    'RemoteAssetDescriptor',
    'RemoteListing',
    'AssetCatalog',
    'RemoteCatalogClient',
    'HttpCatalogClient',
    'BUNDLED_SOUNDS',
    'BUNDLED_SOUNDS_PATH',
    'is_bundled',
    'provision_bundled_sounds',
]
