from building_listing.database import get_db

__all__ = ["get_db"]
