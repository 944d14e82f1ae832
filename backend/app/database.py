# backend/app/database.py
import logging

import asyncpg
from app import config

logger = logging.getLogger(__name__)

# Database connection pool
pool = None


class DuplicateEmailError(Exception):
    """Raised when the users.email unique constraint rejects an insert"""


async def init_db():
    """Initialize database connection pool"""
    global pool
    pool = await asyncpg.create_pool(
        dsn=config.DATABASE_URL,
        min_size=config.DB_POOL_MIN_SIZE,
        max_size=config.DB_POOL_MAX_SIZE,
    )
    await create_tables()
    logger.info("Database pool ready (min=%d, max=%d)",
                config.DB_POOL_MIN_SIZE, config.DB_POOL_MAX_SIZE)

async def close_db():
    """Close database connection pool"""
    global pool
    if pool:
        await pool.close()
        pool = None
        logger.info("Database pool closed")

async def create_tables():
    """Create the users table; the UNIQUE constraint on email guards concurrent registrations"""
    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id SERIAL PRIMARY KEY,
                username VARCHAR(100) NOT NULL,
                email VARCHAR(255) NOT NULL,
                password_hash TEXT NOT NULL,
                role VARCHAR(20) NOT NULL DEFAULT 'user',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                CONSTRAINT users_email_key UNIQUE (email)
            );
        """)


class UserStore:
    """User collection keyed uniquely by email"""

    def __init__(self, db_pool):
        self.pool = db_pool

    async def find_by_email(self, email: str) -> dict | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT id, username, email, password_hash, role
                FROM users WHERE email=$1
            """, email)
        return dict(row) if row else None

    async def insert_user(self, username: str, email: str, password_hash: str,
                          role: str = "user") -> int:
        async with self.pool.acquire() as conn:
            try:
                return await conn.fetchval("""
                    INSERT INTO users (username, email, password_hash, role)
                    VALUES ($1, $2, $3, $4)
                    RETURNING id
                """, username, email, password_hash, role)
            except asyncpg.UniqueViolationError as e:
                raise DuplicateEmailError(email) from e


def get_user_store() -> UserStore:
    """FastAPI dependency returning a store bound to the shared pool"""
    if pool is None:
        raise RuntimeError("Database pool is not initialized")
    return UserStore(pool)
