"""Session state supplied by the host application's credential store."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    """Credentials and scope for authenticated API calls.

    Parameters
    ----------
    access_token : str
        Bearer token sent with every request.
    shop_id : int
        Shop scope; every listing endpoint requires it.
    user_id : int or None
        Account id, needed by the notification endpoints.
    shift_id : int or None
        Shift the user last selected, if any.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    access_token: str = ""
    shop_id: int = 0
    user_id: int | None = None
    shift_id: int | None = None

    @property
    def is_usable(self) -> bool:
        """Whether both a credential and a shop scope are present."""
        return bool(self.access_token) and self.shop_id > 0


class SessionProvider(Protocol):
    """Structural interface for the external credential store."""

    async def get_session(self) -> Session | None: ...


class StaticSessionProvider:
    """Session provider returning a fixed session (scripts and tests)."""

    def __init__(self, session: Session | None) -> None:
        self._session = session

    async def get_session(self) -> Session | None:
        return self._session

    def replace(self, session: Session | None) -> None:
        self._session = session
