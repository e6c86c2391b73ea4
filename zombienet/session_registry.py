"""
Session registry: the process-wide slot for the active network session.

The CLI never runs two networks in one process, so the registry holds at
most one handle. It is an explicit object so tests can swap in their own.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .errors import SessionAlreadyActiveError

logger = logging.getLogger(__name__)


class SessionHandle(ABC):
    """
    Reference to a running, provisioned network.

    Implemented by the orchestration engine's Network; the lifecycle
    guardian only relies on this interface.
    """

    namespace: str

    @abstractmethod
    async def stop(self) -> None:
        """Tear the network down and release its resources."""
        pass

    @abstractmethod
    async def upload_logs(self) -> None:
        """Collect node logs somewhere that outlives the network."""
        pass

    @abstractmethod
    def show_network_info(self) -> None:
        """Print a human-readable summary of the running network."""
        pass


class SessionRegistry:
    """Holds zero or one active SessionHandle."""

    def __init__(self):
        self._session: Optional[SessionHandle] = None

    @property
    def active(self) -> bool:
        return self._session is not None

    def set(self, session: SessionHandle) -> None:
        """
        Register the active session.

        Raises:
            SessionAlreadyActiveError: If a different session is already registered
        """
        if self._session is not None and self._session is not session:
            raise SessionAlreadyActiveError(
                f"Session {self._session.namespace} is still active, "
                f"refusing to register {session.namespace}"
            )
        self._session = session
        logger.debug(f"Registered session {session.namespace}")

    def get(self) -> Optional[SessionHandle]:
        return self._session

    def clear(self) -> None:
        if self._session is not None:
            logger.debug(f"Cleared session {self._session.namespace}")
        self._session = None
