# config.py
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Database configuration
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "payroll")

if DB_HOST and DB_PASSWORD:
    SQLALCHEMY_DATABASE_URI = f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
else:
    # Deployment platforms hand over a single URL
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    if not SQLALCHEMY_DATABASE_URI:
        raise ValueError("Database configuration missing! Set DB_HOST and DB_PASSWORD, or DATABASE_URL, in your .env file")

SQLALCHEMY_TRACK_MODIFICATIONS = False

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-in-production")
TOKEN_EXPIRY_DAYS = int(os.getenv("TOKEN_EXPIRY_DAYS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Frontend dev servers, plus a comma separated list for deployed frontends
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
] + [o.strip() for o in os.getenv("ADDITIONAL_CORS_ORIGINS", "").split(",") if o.strip()]

# How many times id allocation re-reads the last id after a unique-key collision
ID_CONFLICT_RETRIES = int(os.getenv("ID_CONFLICT_RETRIES", "3"))

# Printed at the top of every payslip
COMPANY_NAME = os.getenv("COMPANY_NAME", "Employee Management System")
