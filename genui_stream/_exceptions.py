"""Exceptions raised while running a stream session."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunError(Exception):
    """Exception raised for errors that terminate a run.

    The `message` and `code` are sent to the client in the `run.error` event.
    """

    message: str
    code: str

    def __str__(self) -> str:
        return self.message


@dataclass
class NoMessagesError(RunError):
    """Exception raised when no messages are left to send to the model."""

    message: str = 'no messages found in the input'
    code: str = 'no_messages'


@dataclass(kw_only=True)
class InvalidSpecificationError(RunError):
    """Exception raised when the model produced a UI specification that cannot be used."""

    message: str = 'the model returned an invalid UI specification'
    code: str = 'invalid_specification'


@dataclass(kw_only=True)
class ProviderError(RunError):
    """Exception raised when the model provider request fails."""

    message: str = 'the model provider request failed'
    code: str = 'provider_error'
