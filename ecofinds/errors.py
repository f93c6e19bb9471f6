"""User-facing error kinds raised by the marketplace services."""


class MarketplaceError(Exception):
    """Base class for recoverable, user-facing marketplace conditions."""

    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(MarketplaceError):
    status_code = 401
    default_message = "Please login first"


class NotFound(MarketplaceError):
    status_code = 404
    default_message = "Not found"


class SelfPurchaseForbidden(MarketplaceError):
    status_code = 403
    default_message = "You cannot add your own product to cart"


class DuplicateEntry(MarketplaceError):
    status_code = 409
    default_message = "This item is already in your cart"


class DuplicateReview(MarketplaceError):
    status_code = 409
    default_message = "You've already reviewed this seller for this product"


class InvalidRating(MarketplaceError):
    status_code = 422
    default_message = "Rating must be an integer between 1 and 5"


class NotEligibleToReview(MarketplaceError):
    status_code = 403
    default_message = "You can only review sellers you have purchased from"


class InvalidListing(MarketplaceError):
    status_code = 422
    default_message = "Invalid listing"


class CheckoutFailed(MarketplaceError):
    status_code = 500
    default_message = "Something went wrong during checkout"


class RateLimited(MarketplaceError):
    status_code = 429
    default_message = "Too many requests, try again later"


class InvalidProfile(MarketplaceError):
    status_code = 422
    default_message = "Invalid profile"


class DuplicateEmail(MarketplaceError):
    status_code = 409
    default_message = "This email is already in use"
