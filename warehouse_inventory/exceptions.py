class InventoryError(Exception):
    """Base exception for Warehouse Inventory errors.

    Subclasses set default_message and default_code; callers may override
    either and attach details for programmatic consumers.
    """

    default_message = "An error occurred in the Warehouse Inventory system"
    default_code = None

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'message': self.message,
        }

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(InventoryError):
    """Configuration could not be read or written."""
    default_message = "Configuration error"
    default_code = 'CONFIG'


class ValidationError(InventoryError):
    """A caller-supplied argument violates a precondition."""
    default_message = "Validation error"
    default_code = 'INVALID'


class ConflictError(InventoryError):
    """A uniqueness rule would be broken, or stock blocks a deletion."""
    default_message = "Conflict"
    default_code = 'CONFLICT'


class NotFoundError(InventoryError):
    default_message = "Resource not found"
    default_code = 'NOT_FOUND'


class InsufficientStockError(InventoryError):
    """The transfer source holds less than the requested quantity."""
    default_message = "Insufficient stock"
    default_code = 'INSUFFICIENT_STOCK'


class PersistenceError(InventoryError):
    """The store failed for reasons opaque to the inventory engine."""
    default_message = "Persistence error"
    default_code = 'PERSISTENCE'
