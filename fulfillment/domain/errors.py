# fulfillment/domain/errors.py


class FulfillmentError(Exception):
    """Bazowy blad domeny, niesie status HTTP dla warstwy api."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FulfillmentError):
    status_code = 400


class NotFound(FulfillmentError):
    status_code = 404


class InsufficientStock(FulfillmentError):
    status_code = 400

    def __init__(self, available: int):
        super().__init__(f"Only {available} items available in stock")
        self.available = available


class InvalidState(FulfillmentError):
    status_code = 400


class PaymentVerificationFailed(FulfillmentError):
    status_code = 400

    def __init__(self, message: str = "Payment verification failed"):
        super().__init__(message)


class LockedState(FulfillmentError):
    status_code = 400

    def __init__(self, message: str = "Order is completed and cannot be updated"):
        super().__init__(message)


class PaymentLocked(FulfillmentError):
    status_code = 400

    def __init__(self, message: str = "Payment status is locked"):
        super().__init__(message)


class CancellationNotAllowed(FulfillmentError):
    status_code = 409


class Unexpected(FulfillmentError):
    status_code = 500
