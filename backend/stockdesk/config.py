# backend/stockdesk/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/stockdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Listing page sizes
    PRODUCTS_PER_PAGE = int(os.environ.get("PRODUCTS_PER_PAGE", "50"))
    TRANSACTIONS_PER_PAGE = int(os.environ.get("TRANSACTIONS_PER_PAGE", "20"))

    # Dashboard "near expiry" window, in days from today
    NEAR_EXPIRY_DAYS = int(os.environ.get("NEAR_EXPIRY_DAYS", "7"))

    # AI assistant relay (the relay holds the model API key, not this service)
    ASSISTANT_RELAY_URL = os.environ.get("ASSISTANT_RELAY_URL", "")
    ASSISTANT_TIMEOUT_SECONDS = float(os.environ.get("ASSISTANT_TIMEOUT_SECONDS", "30"))
