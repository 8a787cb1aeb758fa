"""FastAPI dependencies.

Configuration is resolved once per request into a StorageLayout and handed
to the analysis functions explicitly; nothing below the routers reads
settings on its own.

Usage in routers:
    @router.get("/statistics")
    async def get_statistics(layout: StorageLayout = Depends(get_storage_layout)):
        ...
"""

from storage_dashboard.config import settings
from storage_dashboard.layout import StorageLayout


def get_storage_layout() -> StorageLayout:
    """Resolve the storage layout, raising ConfigurationError if unconfigured."""
    return StorageLayout.from_settings(settings)
