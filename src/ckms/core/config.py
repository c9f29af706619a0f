import os

# In a real deployment these come from the environment (see .env.example)
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "your-secret-key-for-jwt-!ChangeMe!"
)
ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "authenticated")
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./ckms.sqlite3")
FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

MODEL_MODULES = [
    "ckms.features.stores.models",
    "ckms.features.orders.models",
    "ckms.features.production.models",
    "ckms.features.inventory.models",
]

TORTOISE_ORM = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {
            "models": [*MODEL_MODULES, "aerich.models"],  # aerich.models for migrations
            "default_connection": "default",
        }
    },
    "use_tz": True,
    "timezone": "UTC",
}
