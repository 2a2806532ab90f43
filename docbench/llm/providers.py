"""Static provider catalog and credential discovery."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import GenerationTask, ModelSpec

PRIORITY_PROVIDER = "groq"

logger = get_logger("llm.providers")


@dataclass(frozen=True)
class ProviderSpec:
    """A catalog entry: an OpenAI-compatible endpoint family and its models."""

    name: str
    display_name: str
    description: str
    website: str
    base_url: str
    models: Tuple[ModelSpec, ...]

    @property
    def env_key(self) -> str:
        return f"{self.name.upper()}_API_KEY"


def _models(*entries: Tuple[str, int, str]) -> Tuple[ModelSpec, ...]:
    return tuple(ModelSpec(name=name, max_tokens=tokens, description=description) for name, tokens, description in entries)


CATALOG: Tuple[ProviderSpec, ...] = (
    ProviderSpec(
        "groq",
        "Groq",
        "Ultra-fast inference on LPU hardware",
        "console.groq.com",
        "https://api.groq.com/openai/v1",
        _models(
            ("llama-3.3-70b-versatile", 12000, "Meta Llama 3.3 70B - Most Capable"),
            ("llama-3.1-8b-instant", 8000, "Meta Llama 3.1 8B - Ultra Fast"),
            ("gemma2-9b-it", 10000, "Google Gemma 2 9B - Balanced Performance"),
            ("qwen-qwq-32b", 10000, "Qwen QwQ 32B - Reasoning"),
            ("llama3-70b-8192", 8000, "Llama 3 70B - High Performance"),
            ("mixtral-8x7b-32768", 15000, "Mixtral 8x7B - Advanced Reasoning"),
        ),
    ),
    ProviderSpec(
        "openai",
        "OpenAI",
        "Industry-leading models with high quality output",
        "platform.openai.com",
        "https://api.openai.com/v1",
        _models(
            ("gpt-4o-mini", 8000, "GPT-4o Mini - Cost Effective"),
            ("gpt-3.5-turbo", 4000, "GPT-3.5 Turbo - Fast and Reliable"),
            ("gpt-4", 8000, "GPT-4 - Most Capable"),
            ("gpt-4-turbo", 8000, "GPT-4 Turbo - Enhanced Performance"),
        ),
    ),
    ProviderSpec(
        "deepinfra",
        "DeepInfra",
        "Good free tier with diverse model selection",
        "deepinfra.com",
        "https://api.deepinfra.com/v1/openai",
        _models(
            ("meta-llama/Llama-3.3-70B-Instruct", 8000, "Llama 3.3 70B - Latest Model"),
            ("meta-llama/Llama-3.1-8B-Instruct", 6000, "Llama 3.1 8B - Fast Generation"),
            ("microsoft/WizardLM-2-8x22B", 10000, "WizardLM 2 - Advanced Reasoning"),
            ("Qwen/Qwen2.5-72B-Instruct", 8000, "Qwen 2.5 72B - Multilingual Support"),
            ("nvidia/Llama-3.1-Nemotron-70B-Instruct", 8000, "Nemotron 70B - NVIDIA Optimized"),
        ),
    ),
    ProviderSpec(
        "together",
        "Together.ai",
        "Free credits with vision model support",
        "together.ai",
        "https://api.together.xyz/v1",
        _models(
            ("meta-llama/Llama-3.2-11B-Vision-Instruct-Turbo", 8000, "Llama 3.2 Vision - Multimodal"),
            ("meta-llama/Llama-3.1-8B-Instruct-Turbo", 6000, "Llama 3.1 8B Turbo"),
            ("Qwen/Qwen2.5-7B-Instruct-Turbo", 6000, "Qwen 2.5 7B Turbo"),
            ("meta-llama/Llama-3.1-70B-Instruct-Turbo", 8000, "Llama 3.1 70B Turbo"),
            ("mistralai/Mixtral-8x7B-Instruct-v0.1", 6000, "Mixtral 8x7B"),
        ),
    ),
    ProviderSpec(
        "fireworks",
        "Fireworks.ai",
        "Fast inference with competitive pricing",
        "fireworks.ai",
        "https://api.fireworks.ai/inference/v1",
        _models(
            ("accounts/fireworks/models/llama-v3p1-8b-instruct", 6000, "Llama 3.1 8B"),
            ("accounts/fireworks/models/qwen2p5-7b-instruct", 6000, "Qwen 2.5 7B"),
            ("accounts/fireworks/models/llama-v3p1-70b-instruct", 8000, "Llama 3.1 70B"),
            ("accounts/fireworks/models/mixtral-8x7b-instruct", 6000, "Mixtral 8x7B"),
        ),
    ),
    ProviderSpec(
        "cerebras",
        "Cerebras",
        "Very fast wafer-scale inference",
        "cerebras.ai",
        "https://api.cerebras.ai/v1",
        _models(
            ("llama3.1-8b", 5000, "Llama 3.1 8B - Ultra Fast Inference"),
            ("llama3.3-70b", 8000, "Llama 3.3 70B - High Performance"),
            ("llama3.1-70b", 8000, "Llama 3.1 70B - Balanced Performance"),
        ),
    ),
    ProviderSpec(
        "openrouter",
        "OpenRouter",
        "Access to multiple providers through one API",
        "openrouter.ai",
        "https://openrouter.ai/api/v1",
        _models(
            ("meta-llama/llama-3.1-8b-instruct:free", 5000, "Llama 3.1 8B (Free Tier)"),
            ("microsoft/wizardlm-2-8x22b:free", 8000, "WizardLM 2 (Free Tier)"),
            ("google/gemma-2-9b-it:free", 6000, "Gemma 2 9B (Free Tier)"),
            ("qwen/qwen-2.5-7b-instruct:free", 6000, "Qwen 2.5 7B (Free Tier)"),
            ("mistralai/mistral-7b-instruct:free", 6000, "Mistral 7B (Free)"),
            ("openchat/openchat-7b:free", 6000, "OpenChat 7B (Free)"),
        ),
    ),
    ProviderSpec(
        "xai",
        "xAI",
        "Grok models",
        "x.ai",
        "https://api.x.ai/v1",
        _models(
            ("grok-beta", 10000, "Grok Beta"),
            ("grok-vision-beta", 8000, "Grok Vision - Multimodal Capabilities"),
            ("grok-2-latest", 8000, "Grok 2"),
        ),
    ),
    ProviderSpec(
        "huggingface",
        "Hugging Face",
        "Open-source models and community-driven AI",
        "huggingface.co",
        "https://api-inference.huggingface.co/v1",
        _models(
            ("microsoft/DialoGPT-large", 4000, "DialoGPT Large - Conversational AI"),
            ("google/flan-t5-large", 4000, "FLAN-T5 Large - Instruction Following"),
            ("bigscience/bloom-7b1", 5000, "BLOOM 7B - Multilingual Model"),
            ("bigcode/starcoder", 8000, "StarCoder - Code Expert"),
        ),
    ),
    ProviderSpec(
        "mistral",
        "Mistral AI",
        "European AI with strong multilingual capabilities",
        "console.mistral.ai",
        "https://api.mistral.ai/v1",
        _models(
            ("mistral-tiny", 4000, "Mistral Tiny - Fast and Efficient"),
            ("mistral-small", 6000, "Mistral Small - Balanced Performance"),
            ("mistral-medium", 8000, "Mistral Medium - High Quality"),
            ("open-mistral-7b", 5000, "Open Mistral 7B - Open Source"),
        ),
    ),
    ProviderSpec(
        "replicate",
        "Replicate",
        "Run open-source models in the cloud",
        "replicate.com",
        "https://api.replicate.com/v1",
        _models(
            ("meta/llama-2-70b-chat", 8000, "Llama 2 70B Chat - Conversational"),
            ("meta/llama-2-13b-chat", 6000, "Llama 2 13B Chat - Efficient"),
            ("meta/llama-2-7b-chat", 4000, "Llama 2 7B Chat - Fast"),
            ("mistralai/mixtral-8x7b-instruct-v0.1", 6000, "Mixtral 8x7B Instruct"),
        ),
    ),
    ProviderSpec(
        "perplexity",
        "Perplexity",
        "AI with real-time web search capabilities",
        "perplexity.ai",
        "https://api.perplexity.ai",
        _models(
            ("llama-3.1-sonar-small-128k-online", 8000, "Sonar Small - Online Search"),
            ("llama-3.1-sonar-large-128k-online", 10000, "Sonar Large - Online Search"),
            ("llama-3.1-8b-instruct", 6000, "Llama 3.1 8B Instruct"),
            ("llama-3.1-70b-instruct", 8000, "Llama 3.1 70B Instruct"),
        ),
    ),
    ProviderSpec(
        "anyscale",
        "Anyscale",
        "Scalable AI infrastructure and models",
        "console.anyscale.com",
        "https://api.endpoints.anyscale.com/v1",
        _models(
            ("meta-llama/Llama-2-7b-chat-hf", 4000, "Llama 2 7B Chat"),
            ("meta-llama/Llama-2-13b-chat-hf", 6000, "Llama 2 13B Chat"),
            ("meta-llama/Llama-2-70b-chat-hf", 8000, "Llama 2 70B Chat"),
            ("codellama/CodeLlama-34b-Instruct-hf", 6000, "Code Llama 34B Instruct"),
            ("mistralai/Mistral-7B-Instruct-v0.1", 6000, "Mistral 7B"),
        ),
    ),
    ProviderSpec(
        "cohere",
        "Cohere",
        "Enterprise-focused language models",
        "dashboard.cohere.com",
        "https://api.cohere.ai/v1",
        _models(
            ("command", 4000, "Command - General Purpose"),
            ("command-light", 3000, "Command Light - Fast and Efficient"),
            ("command-nightly", 5000, "Command Nightly - Latest Features"),
            ("command-r", 6000, "Command R - Enhanced Reasoning"),
        ),
    ),
    ProviderSpec(
        "anthropic",
        "Anthropic",
        "Claude models with strong reasoning capabilities",
        "console.anthropic.com",
        "https://api.anthropic.com/v1",
        _models(
            ("claude-3-5-sonnet-20241022", 8000, "Claude 3.5 Sonnet - Most Capable"),
            ("claude-3-haiku-20240307", 6000, "Claude 3 Haiku - Fast and Efficient"),
            ("claude-3-opus-20240229", 8000, "Claude 3 Opus - Most Powerful"),
            ("claude-3-sonnet-20240229", 8000, "Claude 3 Sonnet - Balanced Performance"),
        ),
    ),
    ProviderSpec(
        "gemini",
        "Google Gemini",
        "Multimodal models with a generous free tier",
        "ai.google.dev",
        "https://generativelanguage.googleapis.com/v1",
        _models(
            ("gemini-1.5-flash", 8000, "Gemini 1.5 Flash - Fast and Free"),
            ("gemini-1.5-pro", 8000, "Gemini 1.5 Pro - Most Capable"),
            ("gemini-pro", 6000, "Gemini Pro - Balanced Performance"),
        ),
    ),
    ProviderSpec(
        "aleph",
        "Aleph Alpha",
        "European AI with multilingual capabilities",
        "aleph-alpha.com",
        "https://api.aleph-alpha.com/v1",
        _models(
            ("luminous-base", 4000, "Luminous Base - Multilingual Foundation"),
            ("luminous-extended", 6000, "Luminous Extended - Enhanced Capabilities"),
            ("luminous-supreme", 8000, "Luminous Supreme - Most Advanced"),
            ("luminous-supreme-control", 8000, "Luminous Supreme Control - Fine-tuned"),
        ),
    ),
    ProviderSpec(
        "stability",
        "Stability AI",
        "Open foundation models for text and code",
        "stability.ai",
        "https://api.stability.ai/v1",
        _models(
            ("stable-code-instruct-3b", 6000, "Stable Code Instruct 3B - Code Generation"),
            ("stablelm-2-1_6b", 4000, "StableLM 2 1.6B - Lightweight Model"),
            ("stablelm-2-12b", 6000, "StableLM 2 12B - Balanced Performance"),
            ("stable-beluga-7b", 6000, "Stable Beluga 7B - Instruction Following"),
        ),
    ),
    ProviderSpec(
        "claude",
        "Claude",
        "Claude models through a separate key",
        "console.anthropic.com",
        "https://api.anthropic.com/v1",
        _models(
            ("claude-3-5-sonnet-20241022", 8000, "Claude 3.5 Sonnet - Latest Version"),
            ("claude-3-haiku-20240307", 6000, "Claude 3 Haiku - Fast Response"),
            ("claude-3-opus-20240229", 8000, "Claude 3 Opus - Maximum Capability"),
        ),
    ),
    ProviderSpec(
        "ollama",
        "Ollama",
        "Open-source models running locally",
        "ollama.ai",
        "http://localhost:11434/v1",
        _models(
            ("llama3.2:3b", 6000, "Llama 3.2 3B - Local, Fast, Free"),
            ("llama3.2:1b", 4000, "Llama 3.2 1B - Ultra Fast Local"),
            ("codellama:7b", 6000, "Code Llama 7B - Local Code Expert"),
            ("mistral:7b", 6000, "Mistral 7B - Local Multilingual"),
            ("qwen2.5:7b", 6000, "Qwen 2.5 7B - Local Advanced"),
            ("gemma2:2b", 4000, "Gemma 2 2B - Local Lightweight"),
        ),
    ),
)

CATALOG_BY_NAME: Dict[str, ProviderSpec] = {spec.name: spec for spec in CATALOG}


@dataclass(frozen=True)
class ConfiguredProvider:
    """A catalog provider paired with the credential that unlocked it."""

    spec: ProviderSpec
    api_key: str = field(repr=False)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def models(self) -> Tuple[ModelSpec, ...]:
        return self.spec.models


@dataclass(frozen=True)
class ProviderRegistry:
    """Immutable, ordered set of credentialed providers passed to the fan-out."""

    providers: Tuple[ConfiguredProvider, ...] = ()

    def __iter__(self) -> Iterator[ConfiguredProvider]:
        return iter(self.providers)

    def __len__(self) -> int:
        return len(self.providers)

    @property
    def names(self) -> List[str]:
        return [provider.name for provider in self.providers]

    def get(self, name: str) -> Optional[ConfiguredProvider]:
        for provider in self.providers:
            if provider.name == name:
                return provider
        return None

    def model(self, provider_name: str, model_name: str) -> Optional[ModelSpec]:
        provider = self.get(provider_name)
        if provider is None:
            return None
        for model in provider.models:
            if model.name == model_name:
                return model
        return None


@dataclass(frozen=True)
class ProviderStatus:
    name: str
    display_name: str
    description: str
    website: str
    available: bool
    model_count: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _credential(spec: ProviderSpec, environ: Mapping[str, str]) -> Optional[str]:
    value = environ.get(spec.env_key, "")
    return value.strip() or None


def discover_providers(
    environ: Mapping[str, str] | None = None,
    *,
    enabled: Sequence[str] | None = None,
    selected: str | None = None,
    catalog: Sequence[ProviderSpec] = CATALOG,
) -> ProviderRegistry:
    """Return the credentialed providers, ``groq`` first, optionally narrowed.

    ``enabled`` restricts the catalog (configuration file). ``selected`` asks
    for a single provider; when it is not available every available provider
    is used instead and a warning is logged.
    """
    environ = os.environ if environ is None else environ
    allowed = {name.lower() for name in enabled} if enabled else None

    available: List[ConfiguredProvider] = []
    for spec in catalog:
        if allowed is not None and spec.name not in allowed:
            continue
        api_key = _credential(spec, environ)
        if api_key:
            available.append(ConfiguredProvider(spec=spec, api_key=api_key))

    # Stable sort keeps catalog order for everything after the priority provider.
    available.sort(key=lambda provider: 0 if provider.name == PRIORITY_PROVIDER else 1)

    if selected:
        choice = selected.lower()
        chosen = [provider for provider in available if provider.name == choice]
        if chosen:
            return ProviderRegistry(tuple(chosen))
        logger.warning(
            "Selected provider '%s' is not available; using all available providers", selected
        )

    return ProviderRegistry(tuple(available))


def expand_tasks(registry: ProviderRegistry) -> List[GenerationTask]:
    """One task per (provider, model), in registry then catalog order."""
    return [
        GenerationTask(provider=provider.name, model=model.name, max_tokens=model.max_tokens)
        for provider in registry
        for model in provider.models
    ]


def provider_statuses(
    environ: Mapping[str, str] | None = None,
    catalog: Sequence[ProviderSpec] = CATALOG,
) -> List[ProviderStatus]:
    environ = os.environ if environ is None else environ
    return [
        ProviderStatus(
            name=spec.name,
            display_name=spec.display_name,
            description=spec.description,
            website=spec.website,
            available=_credential(spec, environ) is not None,
            model_count=len(spec.models),
        )
        for spec in catalog
    ]


__all__ = [
    "CATALOG",
    "CATALOG_BY_NAME",
    "ConfiguredProvider",
    "PRIORITY_PROVIDER",
    "ProviderRegistry",
    "ProviderSpec",
    "ProviderStatus",
    "discover_providers",
    "expand_tasks",
    "provider_statuses",
]
