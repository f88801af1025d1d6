"""Exceptions raised by the storefront services."""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""


class ConfigurationError(StorefrontError, ValueError):
    """A shopper's product configuration was rejected."""


class InvalidDimensions(ConfigurationError):
    def __init__(self, message: str = "width and height must both be greater than zero"):
        super().__init__(message)


class MissingTierSelection(ConfigurationError):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"Choose a package for {product_name}.")


class UnknownAxis(ConfigurationError):
    def __init__(self, axis_type: str):
        self.axis_type = axis_type
        super().__init__(f"Unknown customization: {axis_type}")


class UnknownOption(ConfigurationError):
    def __init__(self, axis_type: str, value):
        self.axis_type = axis_type
        self.value = value
        super().__init__(f"Unknown option {value!r} for {axis_type}")


class InvalidQuantity(ConfigurationError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"quantity must be a positive whole number, got {value!r}")


class IncompleteConfiguration(ConfigurationError):
    def __init__(self, axis_type: str):
        self.axis_type = axis_type
        super().__init__(f"No selection available for {axis_type}")


class UploadRejected(StorefrontError, ValueError):
    """Uploaded file failed the size or type checks."""

    def __init__(self, message: str, *, too_large: bool = False):
        self.too_large = too_large
        super().__init__(message)


class LineItemNotFound(StorefrontError, LookupError):
    def __init__(self, line_id: str):
        self.line_id = line_id
        super().__init__(f"Cart item {line_id} not found")


class EmptyCart(StorefrontError, ValueError):
    def __init__(self):
        super().__init__("Cart is empty")


class PersistenceFailure(StorefrontError, RuntimeError):
    """The data store rejected or failed a read/write."""


class NegativePriceClamped(UserWarning):
    """Issued when discounts would push a unit price below zero."""
