"""
Chat-completion client for the AI tutor.

The upstream is an OpenAI-compatible endpoint. Any failure (no API key,
network error, non-2xx status, malformed body) falls back to the local
preset answers, so ask() never raises.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass, field
import json
import os
import ssl
import threading
import urllib.error
import urllib.request
import logging

from .presets import knowledge_name, preset_answer

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"
DEFAULT_MODEL = "qwen-turbo"
DEFAULT_TIMEOUT_S = 30.0
MAX_TOKENS = 800
TEMPERATURE = 0.7

API_KEY_ENV = "CHEMLAB_API_KEY"
URL_ENV = "CHEMLAB_TUTOR_URL"

SYSTEM_PROMPT = """You are an experienced high-school chemistry teacher tutoring a student.
Current topic: {topic}

Answer the student's question clearly and accurately.
- Use plain, simple language
- Explain principles with concrete examples and chemical equations
- Use technical terms where appropriate, but explain what they mean
- Encourage the student to think and explore
- For experiments, explain the principle and the safety points
- For calculations, show every step

Context: {context}"""


class TutorError(Exception):
    """Raised internally when the upstream cannot produce an answer."""


@dataclass
class TutorRequest:
    question: str
    knowledge_id: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TutorResponse:
    answer: str
    knowledge_id: str
    is_preset: bool = False


class TutorClient:
    """
    Usage:
        client = TutorClient(api_key=os.environ.get("CHEMLAB_API_KEY"))
        resp = client.ask(TutorRequest("Why does the pH jump?", "titration"))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_S
    ):
        self.api_key = api_key if api_key is not None else os.environ.get(API_KEY_ENV)
        self.url = url or os.environ.get(URL_ENV) or DEFAULT_URL
        self.model = model
        self.timeout = timeout

    def build_payload(self, request: TutorRequest) -> Dict[str, Any]:
        system = SYSTEM_PROMPT.format(
            topic=knowledge_name(request.knowledge_id),
            context=json.dumps(request.context, ensure_ascii=False),
        )
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": request.question},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        req = urllib.request.Request(self.url, data=data, method="POST", headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        })
        ctx = ssl.create_default_context()
        try:
            with urllib.request.urlopen(req, context=ctx, timeout=self.timeout) as r:
                body = r.read()
        except (urllib.error.URLError, OSError, ValueError) as e:
            # HTTPError (non-2xx) is a URLError subclass
            raise TutorError(f"request failed: {e}") from e
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as e:
            raise TutorError("response is not JSON") from e

    @staticmethod
    def _extract_answer(data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise TutorError("unexpected response shape") from e
        if not isinstance(content, str) or not content.strip():
            raise TutorError("empty answer")
        return content

    def ask(self, request: TutorRequest) -> TutorResponse:
        """Answer a question; falls back to a preset answer on any upstream failure."""
        if not self.api_key:
            logger.info("No tutor API key configured; using preset answer for %s", request.knowledge_id)
            return self._preset(request)
        try:
            answer = self._extract_answer(self._post(self.build_payload(request)))
        except TutorError as e:
            logger.warning("Tutor upstream unavailable (%s); using preset answer", e)
            return self._preset(request)
        return TutorResponse(answer, request.knowledge_id, is_preset=False)

    def ask_in_background(self, request: TutorRequest, callback: Callable[[TutorResponse], None]) -> threading.Thread:
        """Run ask() on a daemon thread and hand the response to callback."""
        def worker():
            try:
                callback(self.ask(request))
            except Exception:
                logger.exception("Tutor callback failed.")

        t = threading.Thread(target=worker, name="tutor-request", daemon=True)
        t.start()
        return t

    @staticmethod
    def _preset(request: TutorRequest) -> TutorResponse:
        return TutorResponse(preset_answer(request.knowledge_id, request.question), request.knowledge_id, is_preset=True)
