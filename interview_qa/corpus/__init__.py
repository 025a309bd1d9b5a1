"""Corpus index and JSON export."""

from interview_qa.corpus.export import corpus_to_json, dump_corpus, load_corpus
from interview_qa.corpus.index import Corpus

__all__ = [
    "Corpus",
    "corpus_to_json",
    "dump_corpus",
    "load_corpus",
]
