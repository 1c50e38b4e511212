from __future__ import annotations

# Re-export the query layer for centralized imports.

from opsdeck.services.query.cache import QueryClient, QuerySlot, QueryState
from opsdeck.services.query.keys import QueryKey, matches_prefix, query_key
from opsdeck.services.query.mutation import Mutation, MutationDefinition
from opsdeck.services.query.observer import QueryDefinition, QueryObserver

__all__ = [
    "QueryClient",
    "QuerySlot",
    "QueryState",
    "QueryKey",
    "matches_prefix",
    "query_key",
    "Mutation",
    "MutationDefinition",
    "QueryDefinition",
    "QueryObserver",
]
