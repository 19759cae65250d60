"""Application wiring: build the gateway, session and store once at start-up."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from smartspend.gateway.base import Gateway
from smartspend.session import SessionBinding, bind_store
from smartspend.store.financial_store import FinancialStore
from smartspend.store.snapshot import SnapshotStorage

CURRENT_USER_FILE = "current_user"


@dataclass
class App:
    """The long-lived collaborators of one application run."""

    gateway: Gateway
    session: SessionBinding
    store: FinancialStore
    data_dir: Path

    @property
    def current_user_path(self) -> Path:
        return self.data_dir / CURRENT_USER_FILE

    def remember_user(self, user_id: Optional[str]) -> None:
        """Persist (or forget) the signed-in identity between runs."""
        if user_id is None:
            self.current_user_path.unlink(missing_ok=True)
        else:
            self.current_user_path.write_text(user_id, encoding="utf-8")


def remembered_user(data_dir: Path) -> Optional[str]:
    path = data_dir / CURRENT_USER_FILE
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8").strip() or None


def create_app(gateway: Gateway, data_dir: Path, user_id: Optional[str] = None) -> App:
    """Construct the session and store and wire sign-in/sign-out to the store.

    Args:
        gateway: Remote persistence gateway
        data_dir: Directory holding the local snapshot
        user_id: Identity to start with; falls back to the remembered one
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    session = SessionBinding(user_id or remembered_user(data_dir))
    store = FinancialStore(gateway, session, SnapshotStorage(data_dir))
    bind_store(session, store)
    return App(gateway=gateway, session=session, store=store, data_dir=data_dir)
