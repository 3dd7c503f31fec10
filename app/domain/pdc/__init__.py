"""PDC domain - Post-dated checks issued to suppliers"""

from .router import router

__all__ = ["router"]
