#!/usr/bin/env python3
"""
EcoFinds Backend Startup Script
This script starts the FastAPI server with all services.
"""

import uvicorn
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("Starting EcoFinds Backend...")
    logger.info("Available endpoints:")
    logger.info("  - Health Check: GET /health")
    logger.info("  - Catalog: GET/POST /api/products, DELETE /api/products/{product_id}")
    logger.info("  - Shopping Cart: GET/POST/DELETE /api/cart, POST /api/cart/checkout")
    logger.info("  - Purchases: GET /api/purchases")
    logger.info("  - Reviews: POST /api/reviews, GET /api/sellers/{seller_id}/rating")
    logger.info("  - Profile: GET/PUT /api/profile, GET /api/profile/stats")
    logger.info("  - API Docs: http://localhost:8000/docs")

    uvicorn.run(
        "ecofinds.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
