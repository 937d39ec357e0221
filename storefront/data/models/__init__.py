#import all models so SQLAlchemy registers them in Base.metadata

from storefront.data.models.storage_entry import StorageEntryModel

__all__ = ["StorageEntryModel"]
