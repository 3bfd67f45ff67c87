"""Execution context threaded through every check."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from wallet_compliance.models.config import HarnessConfig, ZERO_ADDRESS
from wallet_compliance.models.test_result import TerminalStatus
from wallet_compliance.provider.base import Provider

from .lifecycle import LifecycleManager

logger = logging.getLogger(__name__)


class HarnessError(Exception):
    """A check is missing an input it needs (e.g. a call-bundle id)."""


def error_message(error: BaseException, fallback: str) -> str:
    message = str(error).strip()
    return message or fallback


class CheckOutcome:
    """What a category interpreter concluded about one provider call."""

    def __init__(
        self,
        status: TerminalStatus,
        message: str,
        data: Any = None,
        test_name: Optional[str] = None,
    ):
        self.status = status
        self.message = message
        self.data = data
        self.test_name = test_name  # overrides the descriptor's display name


@dataclass
class ExecutionContext:
    """Account, provider and user parameters for a session.

    Also owns the single in-flight slot: at most one test runs at a time.
    """

    provider: Provider
    account: str
    config: HarnessConfig = field(default_factory=HarnessConfig)
    lifecycle: Optional[LifecycleManager] = None
    call_bundle_id: Optional[str] = None  # set by a successful wallet_sendCalls
    _active: Optional[str] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.lifecycle is None:
            self.lifecycle = LifecycleManager(self.provider)

    @property
    def active_test(self) -> Optional[str]:
        return self._active

    @property
    def busy(self) -> bool:
        return self._active is not None

    def claim(self, key: str) -> bool:
        if self._active is not None:
            return False
        self._active = key
        return True

    def release(self, key: str) -> None:
        if self._active == key:
            self._active = None

    def status_of(self, key: str) -> Optional[str]:
        """'pending' while ``key`` is in flight; display-only."""
        return "pending" if self._active == key else None

    @property
    def recipient(self) -> str:
        """Recipient for eth_* tests; defaults to the account itself."""
        return self.config.recipient or self.account

    @property
    def transfer_recipient(self) -> str:
        return self.config.recipient or ZERO_ADDRESS
