"""Code delivery.

No email provider is wired in: the sender records that a code went out and
leaves delivery to whoever replaces it.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class CodeSender(Protocol):
    async def send_code(self, email: str, code: str, ttl_seconds: int) -> bool:
        ...


class LoggingCodeSender:
    def __init__(self, log_codes: bool = False) -> None:
        self._log_codes = log_codes

    async def send_code(self, email: str, code: str, ttl_seconds: int) -> bool:
        if self._log_codes:
            logger.info(f"Guest code for {email}: {code} (valid {ttl_seconds}s)")
        else:
            logger.info(f"Guest code issued for {email} (valid {ttl_seconds}s)")
        return True
