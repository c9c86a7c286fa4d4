"""LLM client for the smart extractor.

Backends:
- Ollama (local), asked for JSON output through its ``format`` option
- Hugging Face router (cloud, OpenAI-compatible chat completions)

The client only moves text. It returns the model's answer, or "" when the
backend cannot be reached, and leaves payload validation to the caller.
"""

import json
import re
import time
from typing import Callable, Optional

import httpx

from .config import get_settings


HF_CHAT_URL = "https://router.huggingface.co/v1/chat/completions"

# Chat backends have no JSON switch; the system turn asks for it instead
JSON_ONLY_INSTRUCTION = "你只输出一个 JSON 对象，不要输出解释、注释或 Markdown。"

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class LLMClient:
    """Sends analysis prompts to the configured backend.

    Usage:
        client = LLMClient()  # provider and model from settings
        data = client.extract_json(client.generate(prompt))
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        max_retries: int = 2,
        retry_delay: float = 20.0,
    ):
        """Initialize LLM client.

        Args:
            provider: "ollama" or "huggingface" (default from config)
            model: Model name (default from config)
            progress_callback: Optional callback for status and error messages
            transport: httpx transport override (tests use httpx.MockTransport)
            max_retries: Retries while the backend answers 503 (model loading)
            retry_delay: Seconds to wait between those retries
        """
        self.settings = get_settings()
        self.provider = provider or self.settings.llm_provider
        self.progress = progress_callback or (lambda x: None)
        self.transport = transport
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        if model:
            self.model = model
        elif self.provider == "huggingface":
            self.model = self.settings.hf_model
        else:
            self.model = self.settings.ollama_model

    def _backend(self) -> tuple[str, str]:
        """Provider and model actually used for a request."""
        if self.provider == "huggingface" and not self.settings.hf_api_key:
            self.progress("HF API key not set, using Ollama")
            return "ollama", self.settings.ollama_model
        return self.provider, self.model

    def _request(self, backend: str, model: str, prompt: str, temperature: float, max_tokens: int):
        """Build (url, headers, body) for one generation request."""
        if backend == "huggingface":
            body = {
                "model": model,
                "messages": [
                    {"role": "system", "content": JSON_ONLY_INSTRUCTION},
                    {"role": "user", "content": prompt},
                ],
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
            headers = {"Authorization": f"Bearer {self.settings.hf_api_key}"}
            return HF_CHAT_URL, headers, body

        body = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        return f"{self.settings.ollama_base_url}/api/generate", {}, body

    @staticmethod
    def _answer(backend: str, data: dict) -> str:
        if backend == "huggingface":
            choices = data.get("choices") or [{}]
            return (choices[0].get("message", {}).get("content") or "").strip()
        return (data.get("response") or "").strip()

    def generate(
        self,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 8000,
        timeout: float = 300.0,
    ) -> str:
        """Send a prompt and return the model's answer.

        Args:
            prompt: The prompt text
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds

        Returns:
            Answer text, or empty string on any backend failure
        """
        backend, model = self._backend()
        url, headers, body = self._request(backend, model, prompt, temperature, max_tokens)

        with httpx.Client(transport=self.transport, timeout=timeout) as http:
            for attempt in range(self.max_retries + 1):
                try:
                    response = http.post(url, headers=headers, json=body)
                except httpx.RequestError as e:
                    self.progress(f"{backend} request failed: {e}")
                    return ""

                if response.status_code == 503 and attempt < self.max_retries:
                    self.progress(f"{backend} model loading, retrying...")
                    time.sleep(self.retry_delay)
                    continue

                if response.status_code != 200:
                    self.progress(f"{backend} error {response.status_code}: {response.text[:200]}")
                    return ""

                try:
                    return self._answer(backend, response.json())
                except ValueError:
                    self.progress(f"{backend} returned a non-JSON envelope")
                    return ""

        return ""

    def extract_json(self, response: str) -> dict | None:
        """Recover the analysis object from a model answer.

        Accepts a bare object, an object inside a ```json fence, or an
        object surrounded by chatter. Anything that is not a JSON object
        yields None.
        """
        if not response:
            return None

        fenced = _FENCE_RE.search(response)
        if fenced:
            response = fenced.group(1)

        candidates = [response.strip()]
        match = _OBJECT_RE.search(response)
        if match:
            candidates.append(match.group(0))

        for candidate in candidates:
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                return data

        return None

    @property
    def is_available(self) -> bool:
        """Check whether smart mode can reach its backend."""
        if self.provider == "huggingface":
            return bool(self.settings.hf_api_key)

        try:
            with httpx.Client(transport=self.transport, timeout=5.0) as http:
                response = http.get(f"{self.settings.ollama_base_url}/api/tags")
            return response.status_code == 200
        except httpx.RequestError:
            return False
