"""Typed errors raised by the back-office services.

Every error carries a machine-readable ``code`` so the HTTP layer can map it
to a status without parsing messages::

    BackofficeError
    +-- ValidationError        VALIDATION_ERROR
    +-- NotFound               NOT_FOUND
    |   +-- ProductNotFound    PRODUCT_NOT_FOUND
    |   +-- SaleNotFound       SALE_NOT_FOUND
    +-- InsufficientStock      INSUFFICIENT_STOCK
    +-- ProductInUse           PRODUCT_IN_USE
    +-- PersistenceFailure     PERSISTENCE_FAILURE
"""


class BackofficeError(Exception):
    code: str = "BACKOFFICE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BackofficeError):
    code = "VALIDATION_ERROR"


class NotFound(BackofficeError):
    code = "NOT_FOUND"


class ProductNotFound(NotFound):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__("Product {} not found.".format(product_id))


class SaleNotFound(NotFound):
    code = "SALE_NOT_FOUND"

    def __init__(self, sale_id: int):
        self.sale_id = sale_id
        super().__init__("Sale {} not found.".format(sale_id))


class InsufficientStock(BackofficeError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            "Insufficient stock for product {}: requested {}, available {}.".format(
                product_id, requested, available
            )
        )


class ProductInUse(BackofficeError):
    code = "PRODUCT_IN_USE"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(
            "Product {} has recorded sales or stock movements and cannot be deleted.".format(
                product_id
            )
        )


class PersistenceFailure(BackofficeError):
    code = "PERSISTENCE_FAILURE"

    def __init__(self, message: str = "The change could not be saved."):
        super().__init__(message)


__all__ = [
    "BackofficeError",
    "InsufficientStock",
    "NotFound",
    "PersistenceFailure",
    "ProductInUse",
    "ProductNotFound",
    "SaleNotFound",
    "ValidationError",
]
