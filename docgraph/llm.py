from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from openai import OpenAI, AzureOpenAI

from docgraph.settings import Settings, settings

# ---------------------------
# Chat completions
# ---------------------------

_CHAT_SINGLETON = None
_CHAT_LOCK = threading.Lock()


def _build_client(cfg: Settings):
    """(client, model) for the configured provider."""
    prov = cfg.provider
    if prov.provider == "azure":
        client = AzureOpenAI(
            api_key=prov.azure_api_key,
            api_version=prov.azure_api_version,
            azure_endpoint=prov.azure_endpoint,
            timeout=cfg.chat.timeout,
        )
        return client, prov.azure_llm_deployment
    if prov.provider == "openai":
        kwargs: Dict[str, Any] = {"api_key": prov.openai_api_key, "timeout": cfg.chat.timeout}
        if prov.openai_base_url:
            kwargs["base_url"] = prov.openai_base_url
        return OpenAI(**kwargs), prov.openai_llm_model
    raise RuntimeError("LLM_PROVIDER must be 'openai' or 'azure'.")


class Chat:
    """
    Chat completion client used by the page analyzer, backed by OpenAI or Azure OpenAI
    depending on LLM_PROVIDER. Chat.singleton() shares one client across requests.

    Args:
        cfg (Optional[Settings]): Settings bundle to read credentials from. Defaults to
            the module level settings.
    """
    def __init__(self, cfg: Optional[Settings] = None):
        self.cfg = cfg or settings
        self.client, self.model = _build_client(self.cfg)

    def generate(self, prompt: str,
                 system: Optional[str] = None,
                 temperature: Optional[float] = None,
                 max_tokens: Optional[int] = None,
                 json_mode: bool = False) -> str:
        """
        Sends one prompt and returns the reply text.

        Args:
            prompt (str): User message.
            system (Optional[str], optional): System message. Defaults to None.
            temperature (Optional[float], optional): Defaults to CHAT_TEMPERATURE.
            max_tokens (Optional[int], optional): Defaults to CHAT_MAX_TOKENS.
            json_mode (bool, optional): Ask the model for a single JSON object.

        Returns:
            str: Reply text, empty when the model returned no content.
        """
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.cfg.chat.temperature if temperature is None else temperature,
            "max_tokens": self.cfg.chat.max_tokens if max_tokens is None else max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        resp = self.client.chat.completions.create(**request)
        return resp.choices[0].message.content or ""

    @classmethod
    def singleton(cls) -> "Chat":
        global _CHAT_SINGLETON
        if _CHAT_SINGLETON is None:
            with _CHAT_LOCK:
                if _CHAT_SINGLETON is None:
                    _CHAT_SINGLETON = Chat()
        return _CHAT_SINGLETON
