from rest_framework import serializers

from .status import StatusKind

# Party names follow the on-ledger symbol rules: short and alphanumeric.
PARTY_NAME_REGEX = r'^[A-Za-z0-9_]+$'
PARTY_NAME_MAX_LENGTH = 32


class PartyNameField(serializers.RegexField):
    def __init__(self, **kwargs):
        super().__init__(
            PARTY_NAME_REGEX,
            max_length=PARTY_NAME_MAX_LENGTH,
            error_messages={'invalid': "Party names may only contain letters, digits and '_'."},
            **kwargs
        )


# --- Serializers for the Admin ---

class InitializeSerializer(serializers.Serializer):
    """
    Used to initialize the election. The admin defaults to the caller.
    """
    admin = serializers.CharField(required=False, max_length=150)


class AddPartySerializer(serializers.Serializer):
    name = PartyNameField()


class AddVoterSerializer(serializers.Serializer):
    identity = serializers.CharField(max_length=150)


class VotingDeadlineSerializer(serializers.Serializer):
    # Integer unix seconds.
    timestamp = serializers.IntegerField(min_value=0)


# --- Serializers for Voters ---

class CastVoteSerializer(serializers.Serializer):
    """
    Used by a voter to cast their ballot. `voter` defaults to the caller;
    it is only checked, never trusted.
    """
    party = PartyNameField()
    voter = serializers.CharField(required=False, max_length=150)


class DelegateSerializer(serializers.Serializer):
    delegate_to = serializers.CharField(max_length=150)
    delegator = serializers.CharField(required=False, max_length=150)


# --- Serializers for the Public Dashboard ---

class VoterStatusSerializer(serializers.Serializer):
    """
    Read-only view of a voter's status. `target` is only set
    when the status is 'delegated'.
    """
    identity = serializers.CharField()
    status = serializers.ChoiceField(choices=StatusKind.choices, source='kind')
    target = serializers.CharField(allow_null=True)
    delegated_votes = serializers.IntegerField()


class VotingStatsSerializer(serializers.Serializer):
    total_votes = serializers.IntegerField()
    total_parties = serializers.IntegerField()
    total_voters = serializers.IntegerField()


class PartyVoteCountSerializer(serializers.Serializer):
    party = serializers.CharField()
    votes = serializers.IntegerField()
