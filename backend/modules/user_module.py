from __future__ import annotations

from core.composition import FeatureModule
from routes.api_v1.users import router

USER_MODULE = FeatureModule(
    name="users",
    router=router,
    tables=("users",),
)
