"""Shared fixtures."""

import json

import pytest

from bible_companion.annotations import AnnotationStore
from bible_companion.corpus import build_corpus
from bible_companion.storage import MemoryKeyValueStore

SAMPLE_CORPUS = {
    "Genesis": {
        str(ch): {"1": f"Genesis {ch} verse one.", "2": f"Genesis {ch} verse two."}
        for ch in range(1, 51)
    },
    "Exodus": {
        "1": {"1": "Now these are the names of the children of Israel."},
        "2": {"1": "And a man of the house of Levi went and took to wife a daughter of Levi."},
    },
    "Psalms": {
        "23": {
            "1": "The Lord is my shepherd; I shall not want.",
            "2": "He makes me to lie down in green pastures.",
        },
    },
    "John": {
        "3": {
            "16": "For God so loved the world that He gave His only begotten Son.",
            "17": "For God did not send His Son into the world to condemn the world.",
        },
    },
    "1 John": {
        "4": {"8": "He who does not love does not know God, for God is love."},
    },
}


@pytest.fixture
def raw_corpus() -> dict:
    return json.loads(json.dumps(SAMPLE_CORPUS))


@pytest.fixture
def corpus(raw_corpus):
    return build_corpus(raw_corpus)


@pytest.fixture
def corpus_file(tmp_path, raw_corpus):
    path = tmp_path / "nkjv.json"
    path.write_text(json.dumps(raw_corpus), encoding="utf-8")
    return path


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return AnnotationStore(kv)
