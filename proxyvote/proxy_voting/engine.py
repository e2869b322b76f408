import functools
import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass

from .exceptions import (
    AlreadyDelegatedError,
    AlreadyInitializedError,
    AlreadyRegisteredError,
    AlreadyVotedError,
    CircularDelegationError,
    DelegateAlreadyDelegatedError,
    DelegateAlreadyVotedError,
    DelegateNotRegisteredError,
    DelegationChainTooLongError,
    DuplicatePartyError,
    InvalidDeadlineError,
    NotInitializedError,
    NotRegisteredError,
    SelfDelegationError,
    UnknownPartyError,
    VotingClosedError,
)
from .identity import require_auth
from .status import StatusKind, VoterStatus
from .store import DataKey

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_LIMIT = 100


def serialized(method):
    """Runs the operation while holding the store's election lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.store.lock():
            return method(self, *args, **kwargs)
    return wrapper


@dataclass(frozen=True)
class VotingStats:
    total_votes: int
    total_parties: int
    total_voters: int

    def as_dict(self):
        return asdict(self)


class VotingEngine:
    """
    The election: registry, voter state machine, delegation graph and tallies.

    Every mutating operation holds the store lock throughout and does all
    of its reads and checks before its first write, so a rejected call
    leaves the store untouched.
    """

    def __init__(self, store, clock, chain_limit=DEFAULT_CHAIN_LIMIT):
        self.store = store
        self.clock = clock
        self.chain_limit = chain_limit

    # --- Registry ---

    @serialized
    def initialize(self, proof, admin):
        require_auth(proof, admin)

        if self.store.has(DataKey.ADMIN):
            raise AlreadyInitializedError()

        self.store.set(DataKey.ADMIN, admin)
        self.store.set(DataKey.PARTIES, [])
        self.store.set(DataKey.TOTAL_VOTERS, 0)
        logger.info("Election initialized with admin '%s'.", admin)

    @serialized
    def add_party(self, proof, name):
        self._require_admin(proof)

        parties = self.get_parties()
        if name in parties:
            raise DuplicatePartyError(f"Party '{name}' already registered.")

        parties.append(name)
        self.store.set(DataKey.PARTIES, parties)
        self.store.set(DataKey.votes(name), 0)
        logger.info("Party '%s' added (%d registered).", name, len(parties))

    @serialized
    def add_voter(self, proof, identity):
        self._require_admin(proof)

        status = self.get_voter_status(identity)
        if status.kind != StatusKind.NOT_REGISTERED:
            raise AlreadyRegisteredError(f"Voter '{identity}' already registered.")

        total_voters = self.store.get(DataKey.TOTAL_VOTERS, 0)
        self.store.set(DataKey.voter_status(identity), VoterStatus.registered().to_value())
        self.store.set(DataKey.TOTAL_VOTERS, total_voters + 1)
        logger.info("Voter '%s' registered.", identity)

    @serialized
    def set_voting_deadline(self, proof, timestamp):
        self._require_admin(proof)

        now = self.clock.now()
        if timestamp <= now:
            raise InvalidDeadlineError(
                f"Deadline {timestamp} must be after the current time {now}."
            )

        self.store.set(DataKey.VOTING_DEADLINE, timestamp)
        logger.info("Voting deadline set to %d.", timestamp)

    def _require_admin(self, proof):
        admin = self.store.get(DataKey.ADMIN)
        if admin is None:
            raise NotInitializedError()
        require_auth(proof, admin)

    # --- Voting ---

    @serialized
    def vote(self, proof, voter, party):
        require_auth(proof, voter)

        deadline = self.get_voting_deadline()
        if deadline is not None and self.clock.now() > deadline:
            raise VotingClosedError()

        status = self.get_voter_status(voter)
        if status.kind == StatusKind.NOT_REGISTERED:
            raise NotRegisteredError(f"Voter '{voter}' not registered.")
        elif status.kind == StatusKind.VOTED:
            raise AlreadyVotedError(f"Voter '{voter}' already voted.")
        elif status.kind == StatusKind.DELEGATED:
            raise AlreadyDelegatedError(f"Voter '{voter}' has delegated to '{status.target}'.")

        if party not in self.get_parties():
            raise UnknownPartyError(f"Party '{party}' not found.")

        # The voter's own vote plus everything delegated to them.
        weight = 1 + self.store.get(DataKey.delegated_votes(voter), 0)
        current_votes = self.get_vote_count(party)

        self.store.set(DataKey.votes(party), current_votes + weight)
        self.store.set(DataKey.voter_status(voter), VoterStatus.voted().to_value())
        logger.info("Voter '%s' voted for '%s' with weight %d.", voter, party, weight)
        return weight

    # --- Delegation ---

    @serialized
    def delegate(self, proof, delegator, delegate_to):
        require_auth(proof, delegator)

        if delegator == delegate_to:
            raise SelfDelegationError()

        self._check_circular_delegation(delegator, delegate_to)

        delegator_status = self.get_voter_status(delegator)
        if delegator_status.kind == StatusKind.NOT_REGISTERED:
            raise NotRegisteredError(f"Delegator '{delegator}' not registered.")
        elif delegator_status.kind == StatusKind.VOTED:
            raise AlreadyVotedError(f"Delegator '{delegator}' already voted.")
        elif delegator_status.kind == StatusKind.DELEGATED:
            raise AlreadyDelegatedError(f"Delegator '{delegator}' already delegated.")

        delegate_status = self.get_voter_status(delegate_to)
        if delegate_status.kind == StatusKind.NOT_REGISTERED:
            raise DelegateNotRegisteredError(f"Delegate '{delegate_to}' not registered.")
        elif delegate_status.kind == StatusKind.VOTED:
            raise DelegateAlreadyVotedError(f"Delegate '{delegate_to}' already voted.")
        elif delegate_status.kind == StatusKind.DELEGATED:
            raise DelegateAlreadyDelegatedError(f"Delegate '{delegate_to}' has delegated.")

        current_delegated = self.store.get(DataKey.delegated_votes(delegate_to), 0)
        self.store.set(DataKey.delegated_votes(delegate_to), current_delegated + 1)
        self.store.set(DataKey.voter_status(delegator), VoterStatus.delegated(delegate_to).to_value())
        logger.info("Voter '%s' delegated to '%s'.", delegator, delegate_to)

    def _check_circular_delegation(self, delegator, delegate_to):
        """
        Follows the live delegation chain from `delegate_to`.
        Reaching `delegator`, or any node twice, would close a loop.
        """
        current = delegate_to
        visited = []

        while True:
            if current in visited or current == delegator:
                raise CircularDelegationError(
                    f"Delegating '{delegator}' to '{delegate_to}' would form a cycle."
                )
            visited.append(current)

            status = self.get_voter_status(current)
            if status.kind != StatusKind.DELEGATED:
                break
            current = status.target

            if len(visited) > self.chain_limit:
                raise DelegationChainTooLongError(
                    f"Delegation chain from '{delegate_to}' exceeds {self.chain_limit} hops."
                )

    # --- Queries ---

    def get_vote_count(self, party):
        return self.store.get(DataKey.votes(party), 0)

    def get_parties(self):
        return list(self.store.get(DataKey.PARTIES, []))

    def get_voter_status(self, identity):
        return VoterStatus.from_value(self.store.get(DataKey.voter_status(identity)))

    def get_delegated_votes(self, identity):
        return self.store.get(DataKey.delegated_votes(identity), 0)

    def get_voting_stats(self):
        parties = self.get_parties()
        total_votes = sum(self.get_vote_count(party) for party in parties)
        return VotingStats(
            total_votes=total_votes,
            total_parties=len(parties),
            total_voters=self.store.get(DataKey.TOTAL_VOTERS, 0),
        )

    def get_all_results(self):
        return OrderedDict(
            (party, self.get_vote_count(party)) for party in self.get_parties()
        )

    def get_voting_deadline(self):
        return self.store.get(DataKey.VOTING_DEADLINE)
