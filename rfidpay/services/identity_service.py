"""Identity resolver module.

Maps an RFID tag UID onto exactly one user account. UIDs are normalized to
a single canonical form (upper-case hex pairs joined by ':') before every
lookup or write, so readers that emit "04a32b1c", "04-A3-2B-1C" or
"04:A3:2B:1C" all resolve to the same account.
"""
import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rfidpay.exceptions.api_exception import ClientInputError, ErrorKind, UserNotFoundError
from rfidpay.models.user import User

_SEPARATORS = re.compile(r"[\s:\-]")
_HEX = re.compile(r"[0-9A-Fa-f]+")


def normalize_uid(raw: Optional[str]) -> str:
    """Return the canonical form of a tag UID or raise ClientInputError."""
    if raw is None or not raw.strip():
        raise ClientInputError("Missing RFID UID", kind=ErrorKind.INVALID_RFID_UID)

    compact = _SEPARATORS.sub("", raw.strip())
    if compact[:2].lower() == "0x":
        compact = compact[2:]

    if not compact or len(compact) % 2 or not _HEX.fullmatch(compact):
        raise ClientInputError(
            f"Malformed RFID UID: {raw!r}", kind=ErrorKind.INVALID_RFID_UID
        )

    compact = compact.upper()
    return ":".join(compact[i:i + 2] for i in range(0, len(compact), 2))


async def find_user_by_uid(db: AsyncSession, rfid_uid: str) -> Optional[User]:
    """Look up an account by canonical UID. No side effects."""
    query = select(User).where(User.rfid_uid == rfid_uid).limit(1)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def resolve_user(db: AsyncSession, rfid_uid: str) -> User:
    """
    Resolve a raw or canonical UID to its account.

    Raises:
        ClientInputError: UID missing or malformed
        UserNotFoundError: no account holds this UID
    """
    canonical = normalize_uid(rfid_uid)
    user = await find_user_by_uid(db, canonical)
    if user is None:
        raise UserNotFoundError()
    return user


async def authenticate(
    db: AsyncSession,
    rfid_uid: str,
    name: Optional[str] = None,
) -> User:
    """App login where the tag UID acts as the password.

    When a name is supplied it must match the account as well.
    """
    canonical = normalize_uid(rfid_uid)
    query = select(User).where(User.rfid_uid == canonical)
    if name:
        query = query.where(User.name == name)

    result = await db.execute(query.limit(1))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError("Invalid login")
    return user
