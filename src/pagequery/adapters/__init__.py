"""Collaborator implementations for running pagequery outside a host."""

from pagequery.adapters.memory import CorpusFormat, InMemoryCorpus

__all__ = ["CorpusFormat", "InMemoryCorpus"]
