"""
Admin account persistence helpers.
"""

from __future__ import annotations

from core import db


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_admin(*, email: str, password_hash: str, name: str | None) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO admins (email, password, name)
        VALUES ($1, $2, $3)
        RETURNING id, email, name, created_at AS "createdAt", updated_at AS "updatedAt"
        """,
        normalize_email(email),
        password_hash,
        name,
    )
    if row is None:
        raise RuntimeError("Failed to create admin.")
    return row


async def get_admin_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, name, password
        FROM admins
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_admin_profile(admin_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, name, created_at AS "createdAt", updated_at AS "updatedAt"
        FROM admins
        WHERE id = $1
        """,
        admin_id,
    )
