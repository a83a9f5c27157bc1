# errors.py
"""
Error kinds raised by the store and the catalog client.

Route handlers translate these into HTTP responses; every instance carries
the message that is shown to the merchant.
"""


class CollectionsError(Exception):
    message = "Unexpected error"

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)


class FormValidationError(CollectionsError):
    message = "Missing required fields"


class DuplicateNameError(CollectionsError):
    message = "Collection Name should be unique"


class StaleVersionError(CollectionsError):
    message = "Collection was modified by another request"


class CollectionNotFoundError(CollectionsError):
    message = "Collection not found"


class RemoteFetchError(CollectionsError):
    message = "Failed to fetch products from Shopify"


class PersistenceError(CollectionsError):
    message = "Failed to save data"
