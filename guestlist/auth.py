"""Authentication collaborator.

Identities are issued and verified upstream; the identity provider's proxy
asserts the caller's account id in the ``X-Account-Id`` header.
"""

from uuid import UUID

from fastapi import Header, HTTPException, status

ACCOUNT_ID_HEADER = "X-Account-Id"


async def get_current_account_id(
    x_account_id: str | None = Header(default=None, alias=ACCOUNT_ID_HEADER),
) -> UUID:
    if not x_account_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return UUID(x_account_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid account id"
        )
