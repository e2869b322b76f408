from django.urls import path
from . import views

# This file maps URL endpoints to the View classes in views.py

urlpatterns = [
    # --- Admin Endpoints ---
    # e.g., POST /api/v1/election/initialize
    path('election/initialize', views.InitializeElectionView.as_view(), name='initialize-election'),
    path('admin/parties', views.AddPartyView.as_view(), name='admin-add-party'),
    path('admin/voters', views.AddVoterView.as_view(), name='admin-add-voter'),
    path('admin/deadline', views.SetVotingDeadlineView.as_view(), name='admin-set-deadline'),

    # --- Voter Endpoints ---
    path('vote/cast', views.CastVoteView.as_view(), name='cast-vote'),
    path('vote/delegate', views.DelegateView.as_view(), name='delegate-vote'),

    # --- Public Endpoints ---
    # e.g., GET /api/v1/parties/PartyA/votes
    path('parties', views.PartyListView.as_view(), name='party-list'),
    path('parties/<str:name>/votes', views.PartyVoteCountView.as_view(), name='party-vote-count'),
    path('voters/<str:identity>/status', views.VoterStatusView.as_view(), name='voter-status'),
    path('stats', views.VotingStatsView.as_view(), name='voting-stats'),
    path('results', views.ResultsView.as_view(), name='results'),
    path('deadline', views.VotingDeadlineView.as_view(), name='voting-deadline'),
]
