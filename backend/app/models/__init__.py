from app.models.models import (
    Assessment,
    Base,
    IndustryTrendRecord,
    Profile,
)

__all__ = [
    "Base",
    "Profile",
    "Assessment",
    "IndustryTrendRecord",
]
