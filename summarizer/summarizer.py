from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from langchain_core.prompts import PromptTemplate

from config.settings import Settings, get_settings
from students.models import Student
from summarizer.core.prompt import SUMMARY_PROMPT


logger = logging.getLogger("student_api.summarizer")

WORD_LIMIT = 100


class SummarizerError(RuntimeError):
    pass


class SummarizerConnectionError(SummarizerError):
    pass


class SummarizerStatusError(SummarizerError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Ollama API returned status: {status_code}")
        self.status_code = status_code


class SummarizerResponseError(SummarizerError):
    pass


def build_prompt(student: Student) -> str:
    template = PromptTemplate.from_template(SUMMARY_PROMPT)
    return template.format(
        name=student.name,
        age=student.age,
        email=student.email,
        word_limit=WORD_LIMIT,
    )


def _extract_text(data: Any) -> str:
    if not isinstance(data, dict):
        raise SummarizerResponseError("Ollama API response is not a JSON object")
    text = data.get("response")
    if not isinstance(text, str):
        raise SummarizerResponseError("Ollama API response has no 'response' text")
    return text


class OllamaSummarizer:
    """Generates a short student summary through Ollama's generate endpoint.

    One non-streaming request per call, no retries. Unset arguments come
    from ``settings`` (the process settings by default); a timeout of
    ``None`` there waits indefinitely.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.url = url or settings.summarizer_url
        self.model = model or settings.summarizer_model
        self.timeout = timeout if timeout is not None else settings.summarizer_timeout
        self._transport = transport

    def summarize(self, student: Student) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": build_prompt(student),
            "stream": False,
        }
        logger.debug(
            "Calling summarizer: url=%s model=%s student_id=%s",
            self.url,
            self.model,
            student.id,
        )

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            raise SummarizerConnectionError(f"failed to call Ollama API: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise SummarizerStatusError(response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise SummarizerResponseError(f"invalid Ollama API response: {exc}") from exc

        return _extract_text(data)
