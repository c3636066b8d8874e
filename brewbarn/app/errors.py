"""Storefront errors. Each carries the HTTP status the API answers with."""


class StorefrontError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StorefrontError):
    status_code = 404


class ValidationFailure(StorefrontError):
    status_code = 422


class EmptyCartError(StorefrontError):
    status_code = 400

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class PermissionDenied(StorefrontError):
    status_code = 403
