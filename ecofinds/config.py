"""Configuration for the EcoFinds backend, loaded from the environment."""

import os

from dotenv import load_dotenv

load_dotenv()

POSTGRES_CONFIG = {
    "host": os.getenv("POSTGRES_HOST", "localhost"),
    "port": int(os.getenv("POSTGRES_PORT", "5432")),
    "database": os.getenv("POSTGRES_DB", "ecofinds"),
    "user": os.getenv("POSTGRES_USER", "postgres"),
    "password": os.getenv("POSTGRES_PASSWORD", "postgres"),
}

# Takes precedence over POSTGRES_CONFIG when set
DATABASE_URL = os.getenv("DATABASE_URL")

REDIS_CONFIG = {
    "host": os.getenv("REDIS_HOST", "localhost"),
    "port": int(os.getenv("REDIS_PORT", "6379")),
    "db": int(os.getenv("REDIS_DB", "0")),
}

RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "30"))
RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", "60"))  # seconds

# Impact estimator: floor(price * factor + U[0, jitter)), at least minimum kg
CO2_PRICE_FACTOR = 0.1
CO2_JITTER = 2.0
CO2_MINIMUM_KG = 1

CATEGORIES = ["Clothing", "Electronics", "Books", "Furniture", "Accessories", "Other"]

DEFAULT_IMAGE_URL = "placeholder.png"
