import copy
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

SAMPLE_PAYLOAD = {
    "success": True,
    "checkId": "chk-1",
    "currentDocument": {
        "fileName": "essay.txt",
        "fileSize": 120,
        "fileType": "text/plain",
        "duplicateRate": 40,
        "originalText": "The cat sat. The cat sat. Dogs bark loudly at night.",
    },
    "mostSimilarDocument": {
        "id": "doc-1",
        "fileName": "source.txt",
        "author": "A. Writer",
        "content": "Yesterday the cat sat. Dogs bark loudly at night, said the neighbour.",
    },
    "detailedMatches": [
        {
            "id": "m1",
            "documentId": "doc-1",
            "originalText": "The cat sat.",
            "matchedText": "the cat sat.",
            "similarity": 92,
        },
        {
            "id": "m2",
            "documentId": "doc-1",
            "originalText": "Dogs bark loudly at night",
            "matchedText": "Dogs bark loudly at night",
            "similarity": 100,
        },
        {
            "id": "m3",
            "documentId": "doc-2",
            "originalText": "Dogs bark",
            "matchedText": "dogs bark",
            "similarity": 55,
        },
    ],
    "overallSimilarity": 67.4,
    "matchingDocuments": [
        {"id": "doc-1", "fileName": "source.txt", "duplicateRate": 67, "uploadedAt": "2024-03-01T10:00:00Z"},
        {
            "id": "doc-2",
            "fileName": "notes.txt",
            "duplicateRate": 30,
            "uploadedAt": "2024-01-15T08:30:00Z",
            "status": "medium",
        },
        {"id": "doc-3", "fileName": "draft.txt", "duplicateRate": 12, "uploadedAt": "2023-11-02T12:00:00Z"},
    ],
}


@pytest.fixture
def sample_payload():
    return copy.deepcopy(SAMPLE_PAYLOAD)
