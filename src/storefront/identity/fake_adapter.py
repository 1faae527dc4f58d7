"""Fake identity provider — a settable signed-in identity for testing."""

from storefront.identity.port import Identity, IdentityProvider


class FakeIdentityProvider(IdentityProvider):
    """Identity provider that records sign-in requests in memory."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity
        self.sign_in_requests: list[str] = []

    def sign_in_as(self, email: str, display_name: str | None = None, user_id: str | None = None) -> None:
        self.identity = Identity(email=email, display_name=display_name, user_id=user_id)

    def current_identity(self) -> Identity | None:
        return self.identity

    def request_sign_in(self, return_to: str) -> None:
        self.sign_in_requests.append(return_to)

    def sign_out(self) -> None:
        self.identity = None

    def reset(self) -> None:
        self.identity = None
        self.sign_in_requests.clear()
