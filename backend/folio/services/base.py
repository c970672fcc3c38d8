"""
Service Base Classes

Market data and chart services share this contract: one typed
request in, one typed result out, plus a readiness probe for /health.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    A request/response service.

    `execute` takes a validated pydantic request (InputT) and returns the
    service's result (OutputT). Services report "no data" through their
    return values rather than by raising.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service's main operation.

        Args:
            input_data: Request already validated by its schema

        Returns:
            Result conforming to OutputT
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the service can currently produce real data."""
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ExternalAPIError(ServiceError):
    """
    An upstream call produced no usable data.

    `reason` classifies the failure (for example an UnavailableReason)
    so adapters can translate it into a tagged result.
    """

    def __init__(
        self,
        service_name: str,
        message: str,
        reason: Any = None,
        details: Optional[dict] = None,
    ):
        super().__init__(service_name, message, details)
        self.reason = reason
