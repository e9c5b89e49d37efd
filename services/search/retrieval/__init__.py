"""Search Service retrieval module."""

from services.search.retrieval import scoring, similarity

__all__ = ["scoring", "similarity"]
