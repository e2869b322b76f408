from dataclasses import dataclass

from .exceptions import AuthorizationFailedError


@dataclass(frozen=True)
class IdentityProof:
    """
    Asserts that the caller *is* `identity`.

    Only the authentication layer creates these (see
    `permissions.identity_proof`), never from request data.
    """
    identity: str

    def require(self, identity):
        if self.identity != identity:
            raise AuthorizationFailedError(
                f"Caller '{self.identity}' cannot act as '{identity}'."
            )


def require_auth(proof, identity):
    """Raises AuthorizationFailedError unless `proof` is for `identity`."""
    if proof is None:
        raise AuthorizationFailedError("No identity proof was supplied.")
    proof.require(identity)
