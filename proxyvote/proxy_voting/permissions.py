from rest_framework.permissions import BasePermission

from .identity import IdentityProof


def identity_proof(request):
    """
    Builds the caller's IdentityProof from the authenticated user.
    Returns None for anonymous requests.
    """
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return IdentityProof(user.get_username())


class HasIdentityProof(BasePermission):
    """
    Allows access only to authenticated callers, i.e. those
    for whom an identity proof can be issued.
    """
    message = "Authentication is required to act as a voter or administrator."

    def has_permission(self, request, view):
        return identity_proof(request) is not None
