"""
EcoFinds backend configuration.
"""

from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ============= DATA =============
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))

# When set, collections are stored through SQLAlchemy instead of JSON files
DATABASE_URL = os.getenv("DATABASE_URL", "")

COLLECTIONS = ("users", "products", "cart", "purchases")


# ============= SECURITY =============
SECRET_KEY = os.getenv("SECRET_KEY", "ecofinds-dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))


# ============= API =============
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "5000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


# ============= CATALOG =============
DEFAULT_IMAGE_URL = os.getenv(
    "DEFAULT_IMAGE_URL", "https://via.placeholder.com/300x200?text=No+Image"
)
