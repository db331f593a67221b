"""
Demo Data Seeder for the Educational Content API

Creates:
- 1 demo user (email demo@example.com / password demo123456)
- 4 published content items authored by that user

Skips everything when the users table already has rows. Run after
`alembic upgrade head`.
"""
import sys
import uuid
from datetime import datetime, timedelta
from typing import Dict, List

from app.config import settings
from app.database import Database
from app.errors import StoreError
from app.utils.auth import hash_password
from app.utils.logger import logger

DEMO_USER = {
    "email": "demo@example.com",
    "password": "demo123456",
    "first_name": "Demo",
    "last_name": "User",
    "subscription_tier": "basic_pro",
}

DEMO_CONTENT: List[Dict] = [
    {
        "title": "Introduction to Portfolio Theory",
        "body": "Modern Portfolio Theory (MPT) is a framework for constructing investment portfolios "
                "that maximize expected return for a given level of risk...",
        "type": "lesson",
        "category": "Portfolio Theory",
        "difficulty_level": "beginner",
    },
    {
        "title": "Risk vs Return Fundamentals",
        "body": "Understanding the relationship between risk and return is fundamental to "
                "investment decision-making...",
        "type": "tutorial",
        "category": "Risk Management",
        "difficulty_level": "beginner",
    },
    {
        "title": "Diversification Strategies",
        "body": "Diversification is a risk management technique that mixes a wide variety of "
                "investments within a portfolio...",
        "type": "article",
        "category": "Portfolio Management",
        "difficulty_level": "intermediate",
    },
    {
        "title": "Beta Coefficient",
        "body": "Beta is a measure of the volatility, or systematic risk, of a security or "
                "portfolio compared to the market as a whole...",
        "type": "glossary",
        "category": "Financial Terms",
        "difficulty_level": "intermediate",
    },
]


def seed(database: Database, bcrypt_rounds: int = 12) -> bool:
    """Insert the demo user and content. Returns False if data already exists."""
    existing = database.query("SELECT COUNT(*) AS count FROM users")[0]["count"]
    if existing > 0:
        logger.info("Database already seeded, skipping")
        return False

    now = datetime.utcnow()
    user_id = str(uuid.uuid4())
    database.execute(
        "INSERT INTO users (id, email, password_hash, first_name, last_name, email_verified, "
        "subscription_tier, created_at, updated_at) "
        "VALUES (:id, :email, :password_hash, :first_name, :last_name, :email_verified, "
        ":subscription_tier, :created_at, :updated_at)",
        {
            "id": user_id,
            "email": DEMO_USER["email"],
            "password_hash": hash_password(DEMO_USER["password"], bcrypt_rounds),
            "first_name": DEMO_USER["first_name"],
            "last_name": DEMO_USER["last_name"],
            "email_verified": True,
            "subscription_tier": DEMO_USER["subscription_tier"],
            "created_at": now,
            "updated_at": now,
        },
    )

    # Stagger timestamps so newest-first ordering is stable
    for index, item in enumerate(DEMO_CONTENT):
        created_at = now - timedelta(minutes=len(DEMO_CONTENT) - index)
        database.execute(
            "INSERT INTO content (id, title, body, type, category, difficulty_level, published, "
            "author_id, created_at, updated_at) "
            "VALUES (:id, :title, :body, :type, :category, :difficulty_level, :published, "
            ":author_id, :created_at, :updated_at)",
            {
                "id": str(uuid.uuid4()),
                "published": True,
                "author_id": user_id,
                "created_at": created_at,
                "updated_at": created_at,
                **item,
            },
        )

    logger.info(f"Seeded demo user and {len(DEMO_CONTENT)} content items")
    return True


def main() -> int:
    database = Database.from_settings()
    try:
        seed(database, settings.BCRYPT_ROUNDS)
    except StoreError:
        logger.error("Seeding failed")
        return 1
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
