import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

from .clock import SystemClock
from .engine import DEFAULT_CHAIN_LIMIT, VotingEngine
from .store import MemoryStore, ModelStore

logger = logging.getLogger(__name__)

RESULTS_GROUP = "voting_results"

# The memory backend has to outlive a single request.
_memory_store = None


def get_store():
    global _memory_store
    backend = getattr(settings, "VOTING_STORE_BACKEND", "model")
    if backend == "memory":
        if _memory_store is None:
            _memory_store = MemoryStore()
        return _memory_store
    if backend == "model":
        return ModelStore()
    raise ValueError(f"Unknown VOTING_STORE_BACKEND '{backend}'.")


def get_engine():
    """Builds an engine over the configured store and the system clock."""
    return VotingEngine(
        store=get_store(),
        clock=SystemClock(),
        chain_limit=getattr(settings, "VOTING_DELEGATION_CHAIN_LIMIT", DEFAULT_CHAIN_LIMIT),
    )


def get_results_payload(engine):
    """The full live-results payload, shared by the API and the WebSocket."""
    return {
        "results": dict(engine.get_all_results()),
        "stats": engine.get_voting_stats().as_dict(),
    }


def broadcast_results(engine):
    """
    Pushes the current results to every connected dashboard.
    A failed broadcast is logged; it never undoes the vote.
    """
    try:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        async_to_sync(channel_layer.group_send)(
            RESULTS_GROUP,
            {
                "type": "results.update",  # handled by ResultsConsumer.results_update
                "payload": get_results_payload(engine),
            },
        )
        logger.debug("Results update broadcast to '%s'.", RESULTS_GROUP)
    except Exception:
        logger.exception("Could not broadcast results update.")
