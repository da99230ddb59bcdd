"""Retrieval: query embedding, similarity search and prompt context assembly."""

from .prompt import PromptGenerator, add_line_numbers, render_similarity_results
from .rag_engine import RAGEngine
from .schemas import PromptContext, QueryProgressState, RetrievalOptions

__all__ = [
    "PromptContext",
    "PromptGenerator",
    "QueryProgressState",
    "RAGEngine",
    "RetrievalOptions",
    "add_line_numbers",
    "render_similarity_results",
]
