"""Custom exceptions for the storefront core."""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class IdentityMissing(StorefrontError):
    """Raised when no email is available to key an order."""

    def __init__(self, message: str = "No customer email available. Sign in or enter an email address."):
        super().__init__(message)


class OrderPersistenceFailed(StorefrontError):
    """Raised when an order could not be written after payment succeeded."""

    def __init__(self, order_number: str, payment_id: str, cause: Exception | None = None):
        self.order_number = order_number
        self.payment_id = payment_id
        self.cause = cause
        super().__init__(
            f"Failed to save order {order_number} (payment {payment_id}) after multiple attempts. "
            "Please contact support."
        )


class DocumentStoreError(StorefrontError):
    """Raised when the document store cannot complete an operation."""

    pass


class DocumentExists(DocumentStoreError):
    """Raised when creating a record under a key that is already taken."""

    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"Document already exists: {collection}/{key}")


class DocumentNotFound(DocumentStoreError):
    """Raised when updating a record that does not exist."""

    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"Document not found: {collection}/{key}")


class VersionConflict(DocumentStoreError):
    """Raised when a conditional update finds a newer version than expected."""

    def __init__(self, collection: str, key: str, expected: int, found: int | None):
        self.collection = collection
        self.key = key
        self.expected = expected
        self.found = found
        super().__init__(f"Version conflict on {collection}/{key}: expected {expected}, found {found}")


class GatewayUnavailable(StorefrontError):
    """Raised by a gateway adapter when its hosted checkout cannot be opened."""

    pass
