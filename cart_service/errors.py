from http import HTTPStatus


class CartServiceError(Exception):
    """Base for every error the cart service reports to its callers.

    `status_code` is what the HTTP boundary answers with, `message` is the
    text placed in the response body. Neither carries internal details.
    """

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class CartNotFoundError(CartServiceError):
    status_code = HTTPStatus.NOT_FOUND
    message = "Cart not found"


class CartItemNotFoundError(CartServiceError):
    status_code = HTTPStatus.NOT_FOUND
    message = "Product not found in the cart"


class ProductNotFoundError(CartServiceError):
    status_code = HTTPStatus.NOT_FOUND
    message = "Product not found"


class InvalidQuantityError(CartServiceError):
    status_code = HTTPStatus.BAD_REQUEST
    message = "Quantity must be a positive integer"


class CartConflictError(CartServiceError):
    # raised by the store when the cart changed between load and save
    status_code = HTTPStatus.CONFLICT
    message = "Cart was modified concurrently, please retry"


class PersistenceError(CartServiceError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "Internal Server Error"
