from typing import Final
from config.settings import settings

ROOT: Final[str] = settings.STORE_ROOT

# Logical tables of the local store
SETTINGS: Final[str] = f"{ROOT}:settings"  # single-row keyed fields
ENTRIES: Final[str] = f"{ROOT}:entries"  # manual entries keyed by id
META: Final[str] = f"{ROOT}:meta"  # store bookkeeping (schema version)

ACTIVE_CONTEXT_FIELD: Final[str] = "activeContext"
THEME_FIELD: Final[str] = "theme"
PROVIDER_FIELD: Final[str] = "aiProvider"
SCHEMA_VERSION_FIELD: Final[str] = "schemaVersion"

# Bump when the store shape changes; upgrades only ever add.
STORE_SCHEMA_VERSION: Final[int] = 2
