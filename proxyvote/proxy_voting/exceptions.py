class VotingError(Exception):
    """
    Base class for every rejected voting operation.
    `code` is the stable, machine-readable name used by the API.
    """
    code = "voting_error"
    default_message = "The operation was rejected."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NotInitializedError(VotingError):
    code = "not_initialized"
    default_message = "The election has not been initialized."


class AlreadyInitializedError(VotingError):
    code = "already_initialized"
    default_message = "The election is already initialized."


class AuthorizationFailedError(VotingError):
    code = "authorization_failed"
    default_message = "The caller is not authorized for this operation."


class DuplicatePartyError(VotingError):
    code = "duplicate_party"
    default_message = "Party already registered."


class UnknownPartyError(VotingError):
    code = "unknown_party"
    default_message = "Party not found."


class AlreadyRegisteredError(VotingError):
    code = "already_registered"
    default_message = "Voter already registered."


class NotRegisteredError(VotingError):
    code = "not_registered"
    default_message = "Voter not registered."


class AlreadyVotedError(VotingError):
    code = "already_voted"
    default_message = "Voter already voted."


class AlreadyDelegatedError(VotingError):
    code = "already_delegated"
    default_message = "Voter has delegated their vote."


# --- Delegation target variants ---
# Subclasses of the general kinds, so callers can catch either.

class DelegateNotRegisteredError(NotRegisteredError):
    code = "delegate_not_registered"
    default_message = "Delegate not registered."


class DelegateAlreadyVotedError(AlreadyVotedError):
    code = "delegate_already_voted"
    default_message = "Cannot delegate to someone who already voted."


class DelegateAlreadyDelegatedError(AlreadyDelegatedError):
    code = "delegate_already_delegated"
    default_message = "Cannot delegate to someone who delegated."


class SelfDelegationError(VotingError):
    code = "self_delegation"
    default_message = "Cannot delegate to yourself."


class CircularDelegationError(VotingError):
    code = "circular_delegation"
    default_message = "Circular delegation detected."


class DelegationChainTooLongError(VotingError):
    code = "delegation_chain_too_long"
    default_message = "Delegation chain too long."


class InvalidDeadlineError(VotingError):
    code = "invalid_deadline"
    default_message = "Deadline must be in the future."


class VotingClosedError(VotingError):
    code = "voting_closed"
    default_message = "Voting period has ended."
