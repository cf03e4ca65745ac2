from .extractor import TransactionExtractor, build_prompt, load_schema
from .openai_client import ChatClient

__all__ = [
    "ChatClient",
    "TransactionExtractor",
    "build_prompt",
    "load_schema",
]
