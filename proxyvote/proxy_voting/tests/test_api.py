import time
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from proxy_voting.clock import SystemClock


@override_settings(VOTING_STORE_BACKEND="model")
class VotingApiTests(APITestCase):
    def setUp(self):
        User = get_user_model()
        self.users = {
            name: User.objects.create_user(username=name, password="pw")
            for name in ("admin", "v1", "v2", "v3")
        }

    def _as(self, name):
        self.client.force_authenticate(user=self.users[name] if name else None)

    def _post(self, name, url_name, data):
        self._as(name)
        return self.client.post(reverse(url_name), data, format="json")

    def _setup_election(self, parties=("PartyA", "PartyB"), voters=("v1", "v2", "v3")):
        self.assertEqual(self._post("admin", "initialize-election", {}).status_code, status.HTTP_201_CREATED)
        for party in parties:
            self.assertEqual(
                self._post("admin", "admin-add-party", {"name": party}).status_code,
                status.HTTP_201_CREATED,
            )
        for voter in voters:
            self.assertEqual(
                self._post("admin", "admin-add-voter", {"identity": voter}).status_code,
                status.HTTP_201_CREATED,
            )

    # --- Admin ---

    def test_initialize_defaults_admin_to_caller(self):
        response = self._post("admin", "initialize-election", {})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "success")
        self.assertIn("'admin'", response.data["message"])

    def test_initialize_for_someone_else_is_forbidden(self):
        response = self._post("v1", "initialize-election", {"admin": "admin"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "authorization_failed")

    def test_initialize_twice_conflicts(self):
        self._setup_election()
        response = self._post("admin", "initialize-election", {})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "already_initialized")

    def test_mutations_require_authentication(self):
        response = self._post(None, "initialize-election", {})

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertNotIn("code", response.data)

    def test_add_party_before_initialize(self):
        response = self._post("admin", "admin-add-party", {"name": "PartyA"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "not_initialized")

    def test_non_admin_cannot_add_party(self):
        self._setup_election(parties=())
        response = self._post("v1", "admin-add-party", {"name": "PartyA"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse("party-list")).data, {"parties": []})

    def test_duplicate_party_conflicts(self):
        self._setup_election(parties=("X",))
        response = self._post("admin", "admin-add-party", {"name": "X"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "duplicate_party")
        self.assertEqual(self.client.get(reverse("party-list")).data, {"parties": ["X"]})

    def test_invalid_party_name(self):
        self._setup_election(parties=())

        response = self._post("admin", "admin-add-party", {"name": "Bad Name!"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", response.data)

        response = self._post("admin", "admin-add-party", {"name": "P" * 33})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_voter_twice_conflicts(self):
        self._setup_election()
        response = self._post("admin", "admin-add-voter", {"identity": "v1"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "already_registered")

    # --- Voting ---

    def test_direct_votes_and_results(self):
        self._setup_election()

        self.assertEqual(self._post("v1", "cast-vote", {"party": "PartyA"}).status_code, status.HTTP_200_OK)
        self.assertEqual(self._post("v2", "cast-vote", {"party": "PartyB"}).status_code, status.HTTP_200_OK)

        self._as(None)
        count = self.client.get(reverse("party-vote-count", args=["PartyA"]))
        self.assertEqual(count.data, {"party": "PartyA", "votes": 1})
        results = self.client.get(reverse("results"))
        self.assertEqual(results.data, {"results": {"PartyA": 1, "PartyB": 1}})
        stats = self.client.get(reverse("voting-stats"))
        self.assertEqual(stats.data, {"total_votes": 2, "total_parties": 2, "total_voters": 3})

    def test_vote_count_for_unknown_party_is_zero(self):
        response = self.client.get(reverse("party-vote-count", args=["Nobody"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["votes"], 0)

    def test_vote_for_unknown_party(self):
        self._setup_election()
        response = self._post("v1", "cast-vote", {"party": "PartyZ"})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "unknown_party")

    def test_cannot_vote_as_someone_else(self):
        self._setup_election()
        response = self._post("v1", "cast-vote", {"party": "PartyA", "voter": "v2"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        status_response = self.client.get(reverse("voter-status", args=["v2"]))
        self.assertEqual(status_response.data["status"], "registered")

    def test_vote_twice_conflicts(self):
        self._setup_election()
        self._post("v1", "cast-vote", {"party": "PartyA"})
        response = self._post("v1", "cast-vote", {"party": "PartyA"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "already_voted")
        self.assertEqual(self.client.get(reverse("party-vote-count", args=["PartyA"])).data["votes"], 1)

    def test_successful_vote_broadcasts_results(self):
        self._setup_election()

        with patch("proxy_voting.views.broadcast_results") as broadcast:
            self._post("v1", "cast-vote", {"party": "PartyZ"})
            broadcast.assert_not_called()

            self._post("v1", "cast-vote", {"party": "PartyA"})
            broadcast.assert_called_once()

    # --- Delegation ---

    def test_delegation_carries_weight(self):
        self._setup_election()

        self.assertEqual(self._post("v1", "delegate-vote", {"delegate_to": "v2"}).status_code, status.HTTP_200_OK)
        self.assertEqual(self._post("v3", "delegate-vote", {"delegate_to": "v2"}).status_code, status.HTTP_200_OK)
        response = self._post("v2", "cast-vote", {"party": "PartyA"})
        self.assertIn("weight 3", response.data["message"])

        self.assertEqual(self.client.get(reverse("party-vote-count", args=["PartyA"])).data["votes"], 3)
        v1 = self.client.get(reverse("voter-status", args=["v1"])).data
        self.assertEqual(v1, {"identity": "v1", "status": "delegated", "target": "v2", "delegated_votes": 0})
        v2 = self.client.get(reverse("voter-status", args=["v2"])).data
        self.assertEqual(v2["status"], "voted")
        self.assertEqual(v2["delegated_votes"], 2)

    def test_circular_delegation_conflicts(self):
        self._setup_election()
        self._post("v1", "delegate-vote", {"delegate_to": "v2"})
        self._post("v2", "delegate-vote", {"delegate_to": "v3"})
        response = self._post("v3", "delegate-vote", {"delegate_to": "v1"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "circular_delegation")
        v3 = self.client.get(reverse("voter-status", args=["v3"])).data
        self.assertEqual(v3["status"], "registered")
        self.assertIsNone(v3["target"])

    def test_self_delegation(self):
        self._setup_election()
        response = self._post("v1", "delegate-vote", {"delegate_to": "v1"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "self_delegation")

    def test_delegate_to_unregistered_voter(self):
        self._setup_election()
        response = self._post("v1", "delegate-vote", {"delegate_to": "nobody"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "delegate_not_registered")

    def test_unknown_voter_status(self):
        response = self.client.get(reverse("voter-status", args=["ghost"]))

        self.assertEqual(response.data["status"], "not_registered")
        self.assertEqual(response.data["delegated_votes"], 0)

    # --- Deadline ---

    def test_deadline_lifecycle(self):
        self._setup_election()
        self.assertEqual(self.client.get(reverse("voting-deadline")).data, {"timestamp": None})

        deadline = int(time.time()) + 3600
        response = self._post("admin", "admin-set-deadline", {"timestamp": deadline})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(reverse("voting-deadline")).data, {"timestamp": deadline})

        with patch.object(SystemClock, "now", return_value=deadline + 1):
            response = self._post("v1", "cast-vote", {"party": "PartyA"})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "voting_closed")

    def test_deadline_in_the_past(self):
        self._setup_election()
        response = self._post("admin", "admin-set-deadline", {"timestamp": 1})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_deadline")
        self.assertEqual(self.client.get(reverse("voting-deadline")).data, {"timestamp": None})
