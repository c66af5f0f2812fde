"""Replace plain-text passwords with argon2id hashes.

Rows whose password already carries an argon2 prefix are left alone, so the
step can run any number of times.

Revision: 12
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.auth.password import hash_password, is_password_hash

revision = 12
description = "hash legacy passwords"


async def upgrade(conn: AsyncConnection) -> None:
    rows = await conn.execute(text("SELECT id, password FROM users WHERE password IS NOT NULL AND password != ''"))
    for user_id, password in rows.all():
        if is_password_hash(password):
            continue
        await conn.execute(
            text("UPDATE users SET password = :hashed WHERE id = :id"),
            {"hashed": hash_password(password), "id": user_id},
        )
