# models/env.py

from typing import Annotated

from pydantic import Field, HttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env."""

    llm_base_url: Annotated[
        HttpUrl,
        Field(
            default="http://localhost:11434/v1",
            description="OpenAI-compatible endpoint of the local inference server",
        ),
    ]

    # Local servers accept any key, but the OpenAI client refuses an empty one
    llm_api_key: Annotated[
        str,
        Field(min_length=1, default="local", description="API key for the inference server"),
    ]

    chat_model: Annotated[
        str,
        Field(min_length=1, default="llama3.2:3b", description="Chat/completions model name"),
    ]

    embedding_model: Annotated[
        str,
        Field(min_length=1, default="nomic-embed-text", description="Embedding model name"),
    ]

    llm_timeout: Annotated[float, Field(default=120.0, gt=0, description="Seconds per LLM call")]

    llm_retries: Annotated[int, Field(default=3, ge=1, description="Attempts per LLM call")]

    temperature: Annotated[float, Field(default=0.7, ge=0.0, le=2.0)]

    embedding_batch_size: Annotated[
        int,
        Field(default=16, ge=1, description="Chunks embedded per request"),
    ]

    chunk_size: Annotated[int, Field(default=500, gt=0, description="Characters per chunk body")]

    chunk_overlap: Annotated[int, Field(default=50, ge=0, description="Characters shared by adjacent chunks")]

    retrieval_k: Annotated[int, Field(default=10, ge=1, description="Chunks passed to generation")]

    diversity_weight: Annotated[
        float,
        Field(
            default=0.75,
            ge=0.0,
            le=1.0,
            description="1.0 = pure relevance, 0.0 = pure diversity",
        ),
    ]

    log_level: Annotated[str, Field(default="INFO", description="Root logging level")]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LOCALRAG_",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self


env_settings = Settings()
