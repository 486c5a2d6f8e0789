
# models/exceptions.py
"""Custom exceptions for the RAG pipeline."""

class PipelineError(Exception):
    """Base exception for all RAG pipeline errors."""
    pass

class RephraseError(PipelineError):
    """Raised when the query rephrasing stage fails."""
    pass

class SearchError(PipelineError):
    """Raised when retrieval from the vector index fails."""
    pass

class GenerationError(PipelineError):
    """Raised when LLM generation fails."""
    pass

class IngestionError(PipelineError):
    """Raised when document ingestion fails."""
    pass

class ExtractionError(IngestionError):
    """Raised when text cannot be extracted from a document payload."""
    pass

class ProtocolError(PipelineError):
    """Raised when an inbound worker message is malformed or of an unknown kind."""
    pass
