# src/claw/utils/tokenizer.py
from functools import lru_cache

import tiktoken

# Tried in order; tiktoken downloads encodings on first use.
ENCODING_NAMES = ("cl100k_base", "p50k_base")


@lru_cache(maxsize=1)
def _load_encoding():
    error = None
    for name in ENCODING_NAMES:
        try:
            return tiktoken.get_encoding(name)
        except Exception as e:
            error = e
    raise error


class Tokenizer:
    """Token estimates for prompt-size diagnostics."""

    @staticmethod
    def count(text: str) -> int:
        try:
            encoding = _load_encoding()
        except Exception:
            # Offline without a cached encoding: roughly four characters per token.
            return len(text) // 4
        return len(encoding.encode(text, disallowed_special=()))
