# core/config.py
import os

from dotenv import load_dotenv

load_dotenv()

ENV = os.getenv("ENV", "production").lower()
DEBUG = ENV in ("development", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "fabricshop")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()

CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "fabricshop")

# Thumbnail renderer (headless Chrome)
CHROME_BINARY = os.getenv("CHROME_BINARY")
THUMBNAIL_WIDTH = int(os.getenv("THUMBNAIL_WIDTH", "600"))
THUMBNAIL_HEIGHT = int(os.getenv("THUMBNAIL_HEIGHT", "400"))
THUMBNAIL_TIMEOUT = float(os.getenv("THUMBNAIL_TIMEOUT", "10"))

# Cart / favorites writes retried this many times on a concurrent update
CART_WRITE_ATTEMPTS = int(os.getenv("CART_WRITE_ATTEMPTS", "3"))

# scripts/create_admin.py
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@fabricshop.io")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
