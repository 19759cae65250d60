"""Session binding: the authentication lifecycle as seen by the store."""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from smartspend.store.financial_store import FinancialStore

logger = logging.getLogger(__name__)

SignInListener = Callable[[str], Any]
SignOutListener = Callable[[], Any]


class SessionBinding:
    """Holds the signed-in identity and fans out sign-in/sign-out events.

    Listeners may be plain functions or coroutine functions. A failing
    listener is logged and does not stop the others.
    """

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id
        self._sign_in_listeners: list[SignInListener] = []
        self._sign_out_listeners: list[SignOutListener] = []

    def get_current_user_id(self) -> Optional[str]:
        """Return the signed-in user's id, or None."""
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def on_sign_in(self, listener: SignInListener) -> None:
        self._sign_in_listeners.append(listener)

    def on_sign_out(self, listener: SignOutListener) -> None:
        self._sign_out_listeners.append(listener)

    async def sign_in(self, user_id: str) -> None:
        """Bind an identity and notify sign-in listeners with it."""
        if not user_id:
            raise ValueError("user_id must be a non-empty string")
        self._user_id = user_id
        logger.info("Signed in as %s", user_id)
        for listener in list(self._sign_in_listeners):
            await self._call(listener, user_id)

    async def sign_out(self) -> None:
        """Drop the identity and notify sign-out listeners."""
        previous = self._user_id
        self._user_id = None
        logger.info("Signed out %s", previous)
        for listener in list(self._sign_out_listeners):
            await self._call(listener)

    async def _call(self, listener: Callable[..., Any], *args: Any) -> None:
        try:
            result = listener(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Session listener %r failed", listener)


def bind_store(session: SessionBinding, store: "FinancialStore") -> None:
    """Reload the store on sign-in and clear it on sign-out."""
    session.on_sign_in(store.load_user_data)
    session.on_sign_out(store.clear)
