import logging

from django.db import transaction
from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from . import exceptions
from .permissions import HasIdentityProof, identity_proof
from .serializers import (
    AddPartySerializer,
    AddVoterSerializer,
    CastVoteSerializer,
    DelegateSerializer,
    InitializeSerializer,
    PartyVoteCountSerializer,
    VoterStatusSerializer,
    VotingDeadlineSerializer,
    VotingStatsSerializer,
)
from .services import broadcast_results, get_engine

logger = logging.getLogger(__name__)

# Checked in order, so the more specific classes come first.
ERROR_STATUS_CODES = [
    (exceptions.AuthorizationFailedError, status.HTTP_403_FORBIDDEN),
    (exceptions.VotingClosedError, status.HTTP_403_FORBIDDEN),
    (exceptions.UnknownPartyError, status.HTTP_404_NOT_FOUND),
    (exceptions.AlreadyInitializedError, status.HTTP_409_CONFLICT),
    (exceptions.DuplicatePartyError, status.HTTP_409_CONFLICT),
    (exceptions.AlreadyRegisteredError, status.HTTP_409_CONFLICT),
    (exceptions.AlreadyVotedError, status.HTTP_409_CONFLICT),
    (exceptions.AlreadyDelegatedError, status.HTTP_409_CONFLICT),
    (exceptions.CircularDelegationError, status.HTTP_409_CONFLICT),
]


def _status_code_for(exc):
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


# ---
# Base classes
# ---
class EngineView(views.APIView):
    """
    Gives each request a fresh engine and turns rejected
    operations into {"status": "error", ...} responses.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.engine = get_engine()

    def handle_exception(self, exc):
        if isinstance(exc, exceptions.VotingError):
            logger.warning("%s rejected: %s (%s)", type(self).__name__, exc, exc.code)
            return Response(
                {"status": "error", "code": exc.code, "message": str(exc)},
                status=_status_code_for(exc)
            )
        return super().handle_exception(exc)


class MutationView(EngineView):
    """
    A POST endpoint that runs one engine operation for the caller.

    Subclasses set `serializer_class` and implement `perform(proof, data)`,
    returning the success message.

    Permissions:
    - Must be authenticated, so an identity proof can be issued.
    """
    permission_classes = [HasIdentityProof]
    serializer_class = None
    success_status = status.HTTP_200_OK

    def perform(self, proof, data):
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        # 1. Validate the incoming data
        serializer = self.serializer_class(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        # 2. Run the operation; nothing is committed if it fails
        proof = identity_proof(request)
        with transaction.atomic():
            message = self.perform(proof, serializer.validated_data)

        return Response(
            {"status": "success", "message": message},
            status=self.success_status
        )


# ---
# Admin Endpoints
# ---
class InitializeElectionView(MutationView):
    """
    Sets the election's administrator. Only callable once.
    """
    serializer_class = InitializeSerializer
    success_status = status.HTTP_201_CREATED

    def perform(self, proof, data):
        admin = data.get('admin', proof.identity)
        self.engine.initialize(proof, admin)
        return f"Election initialized with administrator '{admin}'."


class AddPartyView(MutationView):
    serializer_class = AddPartySerializer
    success_status = status.HTTP_201_CREATED

    def perform(self, proof, data):
        self.engine.add_party(proof, data['name'])
        return f"Party '{data['name']}' added."


class AddVoterView(MutationView):
    serializer_class = AddVoterSerializer
    success_status = status.HTTP_201_CREATED

    def perform(self, proof, data):
        self.engine.add_voter(proof, data['identity'])
        return f"Voter '{data['identity']}' registered."


class SetVotingDeadlineView(MutationView):
    serializer_class = VotingDeadlineSerializer

    def perform(self, proof, data):
        self.engine.set_voting_deadline(proof, data['timestamp'])
        return f"Voting deadline set to {data['timestamp']}."


# ---
# Voter Endpoints
# ---
class CastVoteView(MutationView):
    """
    Casts the caller's vote, carrying every vote delegated to them.
    Connected dashboards get the new results afterwards.
    """
    serializer_class = CastVoteSerializer

    def perform(self, proof, data):
        voter = data.get('voter', proof.identity)
        weight = self.engine.vote(proof, voter, data['party'])
        return f"Vote cast for '{data['party']}' with weight {weight}."

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == status.HTTP_200_OK:
            broadcast_results(self.engine)
        return response


class DelegateView(MutationView):
    serializer_class = DelegateSerializer

    def perform(self, proof, data):
        delegator = data.get('delegator', proof.identity)
        self.engine.delegate(proof, delegator, data['delegate_to'])
        return f"Vote delegated to '{data['delegate_to']}'."


# ---
# Public Endpoints
# ---
class PublicView(EngineView):
    """
    Read-only queries. These never fail on missing data.

    Permissions:
    - AllowAny: Anyone can view this.
    """
    permission_classes = [AllowAny]


class PartyListView(PublicView):
    def get(self, request, *args, **kwargs):
        return Response({"parties": self.engine.get_parties()})


class PartyVoteCountView(PublicView):
    def get(self, request, name, *args, **kwargs):
        serializer = PartyVoteCountSerializer({
            "party": name,
            "votes": self.engine.get_vote_count(name),
        })
        return Response(serializer.data)


class VoterStatusView(PublicView):
    def get(self, request, identity, *args, **kwargs):
        voter_status = self.engine.get_voter_status(identity)
        serializer = VoterStatusSerializer({
            "identity": identity,
            "kind": voter_status.kind,
            "target": voter_status.target,
            "delegated_votes": self.engine.get_delegated_votes(identity),
        })
        return Response(serializer.data)


class VotingStatsView(PublicView):
    def get(self, request, *args, **kwargs):
        serializer = VotingStatsSerializer(self.engine.get_voting_stats())
        return Response(serializer.data)


class ResultsView(PublicView):
    def get(self, request, *args, **kwargs):
        return Response({"results": self.engine.get_all_results()})


class VotingDeadlineView(PublicView):
    def get(self, request, *args, **kwargs):
        # null when no deadline has been set
        return Response({"timestamp": self.engine.get_voting_deadline()})
