# taskmaster/services/ai_assistant.py
import httpx
import json
from typing import Dict, List, Optional
from taskmaster.core.exceptions import AINotConfigured, AIServiceError
from taskmaster.core.settings import settings
import logging

logger = logging.getLogger("TaskMaster.AI")

DESCRIPTION_SYSTEM_PROMPT = "You are a helpful assistant that generates task descriptions for project management."
SUMMARY_SYSTEM_PROMPT = "You are a helpful assistant that summarizes tasks."
PLACEHOLDER_KEYS = ("", "your-openai-api-key-here")


class AIAssistant:
    """
    Клиент OpenAI-совместимого chat completions API.

    Создаётся один раз при старте приложения из настроек и передаётся через dependency.
    Без API-ключа клиент находится в явном состоянии "не сконфигурирован":
    любой вызов -> AINotConfigured (400), сеть не трогается.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.configured = api_key is not None and api_key.strip() not in PLACEHOLDER_KEYS
        self._client: Optional[httpx.AsyncClient] = None
        if self.configured:
            self._client = httpx.AsyncClient(
                base_url=base_url.rstrip("/"),
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=httpx.Timeout(10.0, read=timeout),
                transport=transport,
            )

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "AIAssistant":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.OPENAI_MODEL,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            transport=transport,
        )

    def ensure_configured(self) -> httpx.AsyncClient:
        if not self.configured or self._client is None:
            raise AINotConfigured()
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _chat(self, messages: List[Dict[str, str]], max_tokens: int, temperature: float) -> str:
        client = self.ensure_configured()
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        try:
            logger.info(f"Sending chat completion request with model {self.model}")
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            logger.error("Timeout while contacting AI provider")
            raise AIServiceError("AI service timed out")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                logger.error("AI provider rejected the API key")
                raise AIServiceError("Invalid OpenAI API key", status_code=400)
            logger.error(f"AI provider returned {e.response.status_code}: {e.response.text[:200]}")
            raise AIServiceError(f"AI service error: {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"Request error while contacting AI provider: {e}")
            raise AIServiceError(f"AI service unreachable: {e.__class__.__name__}")
        except json.JSONDecodeError:
            logger.error("Failed to decode JSON response from AI provider")
            raise AIServiceError("AI service returned an invalid response")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"AI response missing expected content: {data}")
            raise AIServiceError("AI service returned an unexpected response format")
        return (content or "").strip()

    async def generate_description(self, title: str, context: Optional[str] = None) -> str:
        extra = f". Additional context: {context}" if context else ""
        prompt = (
            f'Generate a detailed task description for a task with the title: "{title}"{extra}.\n\n'
            "The description should:\n"
            "- Be professional and clear\n"
            "- Include acceptance criteria if applicable\n"
            "- Be concise but comprehensive\n"
            "- Be 2-4 sentences"
        )
        return await self._chat(
            [{"role": "system", "content": DESCRIPTION_SYSTEM_PROMPT}, {"role": "user", "content": prompt}],
            max_tokens=200,
            temperature=0.7,
        )

    async def summarize(self, title: str, description: Optional[str] = None, comments: Optional[List[str]] = None) -> str:
        lines = [
            "Summarize the following task:",
            "",
            f"Title: {title}",
            f"Description: {description or 'No description'}",
        ]
        if comments:
            lines.append("Comments: " + "\n".join(comments))
        lines += ["", "Provide a brief summary in 1-2 sentences."]
        return await self._chat(
            [{"role": "system", "content": SUMMARY_SYSTEM_PROMPT}, {"role": "user", "content": "\n".join(lines)}],
            max_tokens=100,
            temperature=0.5,
        )
