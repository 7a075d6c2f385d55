"""Errores del almacén de suscripciones."""

from typing import Optional


class StoreError(Exception):
    """The backing database rejected or could not serve an operation."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class SubscriptionNotFoundError(StoreError):
    """No row matched the requested subscription id."""

    def __init__(self, subscription_id: int):
        self.subscription_id = subscription_id
        super().__init__(f"subscription {subscription_id} lookup")

    def __str__(self) -> str:
        return f"subscription {self.subscription_id} not found"
