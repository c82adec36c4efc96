class MarketplaceError(Exception):
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(MarketplaceError):
    kind = "not_found"


class OutOfStockError(MarketplaceError):
    kind = "out_of_stock"

    def __init__(self, message: str, product_id: int) -> None:
        super().__init__(message)
        self.product_id = product_id


class ForbiddenError(MarketplaceError):
    kind = "forbidden"


class InvalidRequestError(MarketplaceError):
    kind = "invalid"


class ConflictError(MarketplaceError):
    kind = "conflict"
