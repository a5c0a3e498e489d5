"""
Text generation client used for intent classification, HyDE, and reranking.
"""

from __future__ import annotations

import os
from typing import Any, Protocol, TypeVar

from google.genai import Client as GenAIClient
from google.genai.types import HttpOptions
from pydantic import BaseModel, ValidationError


_DEFAULT_MODEL = "gemini-2.5-flash-lite"

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class GenerationError(RuntimeError):
    """Raised when the model returns no text or text that violates the schema."""


class Generator(Protocol):
    """Free-text and schema-constrained generation."""

    async def generate(
        self, system_prompt: str, user_prompt: str, *, temperature: float = 0.0
    ) -> str:
        """Return plain text for the prompt pair."""

    async def generate_structured(
        self,
        schema: type[SchemaT],
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
    ) -> SchemaT:
        """Return an instance of *schema* parsed from the model output."""


class TextGenerator:
    """Google GenAI backed implementation of :class:`Generator`."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv("INDIE_FINDER_CHAT_MODEL", _DEFAULT_MODEL)
        if client is not None:
            self._client = client
            return
        if api_key is None:
            api_key = os.getenv("GOOGLE_API_KEY")
        if api_key is None:
            raise ValueError(
                "GOOGLE_API_KEY not found within the current environment: please export it or provide it to the class constructor."
            )
        self._client = GenAIClient(
            api_key=api_key, http_options=HttpOptions(api_version="v1beta")
        )

    async def generate(
        self, system_prompt: str, user_prompt: str, *, temperature: float = 0.0
    ) -> str:
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=user_prompt,
            config={
                "system_instruction": system_prompt,
                "temperature": temperature,
            },
        )
        if response.text is None:
            raise GenerationError(f"Model {self.model} returned no text")
        return response.text.strip()

    async def generate_structured(
        self,
        schema: type[SchemaT],
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
    ) -> SchemaT:
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=user_prompt,
            config={
                "system_instruction": system_prompt,
                "temperature": temperature,
                "response_mime_type": "application/json",
                "response_json_schema": schema.model_json_schema(),
            },
        )
        if response.text is None:
            raise GenerationError(f"Model {self.model} returned no structured output")
        try:
            return schema.model_validate_json(response.text)
        except ValidationError as exc:
            raise GenerationError(
                f"Model output does not match {schema.__name__}: {exc}"
            ) from exc
