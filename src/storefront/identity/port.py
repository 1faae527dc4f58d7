"""Identity provider port (abstract interface)."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The signed-in customer as reported by the identity provider."""

    email: str | None
    display_name: str | None = None
    user_id: str | None = None


class IdentityProvider(ABC):
    """Abstract identity provider interface."""

    @abstractmethod
    def current_identity(self) -> Identity | None:
        """Return the signed-in identity, or None for a guest."""
        ...

    @abstractmethod
    def request_sign_in(self, return_to: str) -> None:
        """Send the customer to sign in, coming back to ``return_to`` afterwards."""
        ...

    @abstractmethod
    def sign_out(self) -> None:
        ...
