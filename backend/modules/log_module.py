from __future__ import annotations

from core.composition import FeatureModule
from routes.api_v1.logs import router

# Log entries are checked against users through the users provider.
LOG_MODULE = FeatureModule(
    name="logs",
    router=router,
    tables=("logs",),
    imports=("users",),
)
