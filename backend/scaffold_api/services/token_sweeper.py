"""Background sweeper that deletes expired refresh tokens."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from sqlalchemy.orm import Session

from scaffold_api.config import settings
from scaffold_api.core.database import SessionLocal
from scaffold_api.core.metrics import EXPIRED_TOKENS_DELETED, TOKEN_SWEEPER_UP
from scaffold_api.services.token_service import token_service

logger = logging.getLogger(__name__)


class TokenSweeper:
    """Periodic expired refresh token cleanup."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._heartbeat: float = 0.0
        self._deleted_count: int = 0
        self._lock = threading.Lock()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="token-sweeper", daemon=True)
        self._thread.start()
        TOKEN_SWEEPER_UP.set(1)
        logger.info("Token sweeper started")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        TOKEN_SWEEPER_UP.set(0)
        logger.info("Token sweeper stopped")

    def status(self) -> dict:
        return {
            "running": self.is_running(),
            "last_heartbeat": self._heartbeat,
            "deleted_count": self._deleted_count,
        }

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception as exc:
                logger.exception("Token sweep failed: %s", exc)
            self._heartbeat = time.time()
            self._stop_event.wait(max(1.0, settings.TOKEN_SWEEP_INTERVAL_SECONDS))

    def run_once(self) -> int:
        """Delete expired refresh tokens once; returns the number removed."""
        db = self._session_factory()
        try:
            deleted = token_service.cleanup_expired_tokens(db)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        if deleted:
            logger.info("Deleted %d expired refresh tokens", deleted)
            EXPIRED_TOKENS_DELETED.inc(deleted)
        with self._lock:
            self._deleted_count += deleted
        return deleted


token_sweeper = TokenSweeper()
