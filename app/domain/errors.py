# app/domain/errors.py


class NotFoundError(ValueError):
    """Nieznany produkt, pozycja koszyka albo rekord magazynu."""


class InvalidArgumentError(ValueError):
    pass


class InsufficientStockError(ValueError):
    """Rezerwacja odrzucona przez magazyn."""

    def __init__(self, message: str, available: int = 0):
        super().__init__(message)
        self.available = available


class ForbiddenError(PermissionError):
    pass


class CartLockBusy(RuntimeError):
    """Lock koszyka trzyma inna operacja (ponawiane przez lock_wait)."""


class CartLockTimeout(RuntimeError):
    pass
