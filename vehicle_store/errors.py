class StoreError(Exception):
    """Base class for errors rendered to clients as {"error": message}."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    status_code = 400


class NotFoundError(StoreError):
    status_code = 404


class ConflictError(StoreError):
    status_code = 400


class InsufficientStockError(ConflictError):
    def __init__(self, vehicle_id: int, available: int, requested: int):
        super().__init__(f"Not enough vehicles available. Available: {available}, Requested: {requested}")
        self.vehicle_id = vehicle_id
        self.available = available
        self.requested = requested


class InvalidCredentialsError(StoreError):
    status_code = 400


class AuthenticationError(StoreError):
    status_code = 401
