"""FastAPI application for the EcoFinds marketplace backend."""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ecofinds.db.redis_client import redis_client
from ecofinds.errors import MarketplaceError, RateLimited, Unauthenticated
from ecofinds.services.catalog_service import product_catalog_service
from ecofinds.services.checkout_service import checkout_service
from ecofinds.services.profile_service import profile_service
from ecofinds.services.purchase_service import purchase_service
from ecofinds.services.review_service import review_service
from ecofinds.services.shopping_cart_service import shopping_cart_service

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="EcoFinds API",
    description="Second-hand marketplace backend: cart, checkout, purchases and seller ratings",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models for request/response
class ListingRequest(BaseModel):
    title: str
    category: str
    price: Decimal
    description: Optional[str] = None
    image_url: Optional[str] = None


class CartItemRequest(BaseModel):
    product_id: int


class ReviewRequest(BaseModel):
    seller_id: str
    product_id: int
    rating: int
    review_text: str = ""


class ProfileRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def current_user(x_user_id: Optional[str] = Header(None)) -> str:
    """Identity resolved upstream by the authentication gateway."""
    if not x_user_id:
        raise Unauthenticated()
    return x_user_id


def rate_limited(endpoint: str):
    def dependency(user_id: str = Depends(current_user)) -> str:
        if not redis_client.rate_limit_check(user_id, endpoint):
            logger.warning(f"Rate limit exceeded for user {user_id} on {endpoint}")
            raise RateLimited()
        return user_id

    return dependency


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "EcoFinds API"}


# Catalog Endpoints
@app.get("/api/products")
def list_products(category: Optional[str] = None, search: Optional[str] = None):
    """Browse the product feed."""
    try:
        return {"products": product_catalog_service.list_feed(category, search)}
    except Exception as e:
        logger.error(f"Error listing products: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/products/{product_id}")
def get_product(product_id: int):
    """Get a single product."""
    try:
        return product_catalog_service.get_product(product_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error getting product: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/products", status_code=201)
def create_listing(request: ListingRequest, user_id: str = Depends(rate_limited("create_listing"))):
    """List a product for sale."""
    try:
        return product_catalog_service.create_listing(
            user_id,
            title=request.title,
            category=request.category,
            price=request.price,
            description=request.description,
            image_url=request.image_url,
        )
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error creating listing: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.delete("/api/products/{product_id}")
def delete_listing(product_id: int, user_id: str = Depends(rate_limited("delete_listing"))):
    """Take one of the user's listings down."""
    try:
        product_catalog_service.delete_listing(user_id, product_id)
        return {"success": True, "message": "Listing deleted"}
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error deleting listing: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/users/{user_id}/listings")
def list_user_listings(user_id: str):
    """Get a seller's listings."""
    try:
        return {"products": product_catalog_service.list_user_listings(user_id)}
    except Exception as e:
        logger.error(f"Error listing user products: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# Shopping Cart Endpoints
@app.get("/api/cart")
def get_cart(user_id: str = Depends(current_user)):
    """Get user's cart contents."""
    try:
        return shopping_cart_service.get_cart(user_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error getting cart: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/cart/count")
def get_cart_count(user_id: str = Depends(current_user)):
    """Get the number of items in the cart."""
    try:
        return {"count": shopping_cart_service.cart_count(user_id)}
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error counting cart: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/cart", status_code=201)
def add_to_cart(request: CartItemRequest, user_id: str = Depends(rate_limited("add_to_cart"))):
    """Add item to shopping cart."""
    try:
        return shopping_cart_service.add_item(user_id, request.product_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error adding to cart: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.delete("/api/cart/{cart_item_id}")
def remove_from_cart(cart_item_id: int, user_id: str = Depends(current_user)):
    """Remove item from shopping cart."""
    try:
        shopping_cart_service.remove_item(user_id, cart_item_id)
        return {"success": True, "message": "Item removed from cart"}
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error removing from cart: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/cart/checkout")
def checkout(user_id: str = Depends(rate_limited("checkout"))):
    """Convert cart to purchases."""
    try:
        return checkout_service.checkout(user_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error during checkout: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# Purchase and Review Endpoints
@app.get("/api/purchases")
def list_purchases(user_id: str = Depends(current_user)):
    """Get the user's purchase history."""
    try:
        return {"purchases": purchase_service.list_purchases(user_id)}
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error listing purchases: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/reviews", status_code=201)
def submit_review(request: ReviewRequest, user_id: str = Depends(rate_limited("submit_review"))):
    """Rate a seller after a purchase."""
    try:
        return review_service.submit_review(
            user_id, request.seller_id, request.product_id, request.rating, request.review_text
        )
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error submitting review: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/sellers/{seller_id}/rating")
def get_seller_rating(seller_id: str):
    """Get a seller's average rating and review count."""
    try:
        return review_service.seller_rating(seller_id)
    except Exception as e:
        logger.error(f"Error getting seller rating: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/sellers/{seller_id}/reviews")
def list_seller_reviews(seller_id: str):
    """Get the reviews a seller has received, newest first."""
    try:
        return {"reviews": review_service.list_seller_reviews(seller_id)}
    except Exception as e:
        logger.error(f"Error listing seller reviews: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/profile")
def get_profile(user_id: str = Depends(current_user)):
    """Get the user's profile."""
    try:
        return profile_service.get_profile(user_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error getting profile: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.put("/api/profile")
def update_profile(request: ProfileRequest, user_id: str = Depends(rate_limited("update_profile"))):
    """Update the user's username and/or email."""
    try:
        return profile_service.update_profile(user_id, username=request.username, email=request.email)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error updating profile: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/profile/stats")
def get_profile_stats(user_id: str = Depends(current_user)):
    """Get sales, purchases, rating and impact statistics for the user."""
    try:
        return profile_service.get_stats(user_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.error(f"Error getting profile stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
