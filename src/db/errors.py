# error taxonomy shared by the store, the api and the client views


class StoreError(Exception):
    """Any persistence failure."""


class DuplicateKeyError(StoreError):
    """
    Unique constraint violation (user name, product name).
    The message is the raw constraint message from sqlite.
    """


class ValidationError(ValueError):
    """Missing or invalid required fields."""


class EmptyCartError(ValidationError):
    def __init__(self, message: str = "El carrito está vacío"):
        super().__init__(message)


class OutOfStockError(ValidationError):
    """Checkout would drive the stock of some product below zero."""

    def __init__(self, shortages: dict[str, int]):
        self.shortages = shortages
        names = ", ".join(sorted(shortages))
        super().__init__(f"Stock insuficiente: {names}")


class LoginError(Exception):
    pass
