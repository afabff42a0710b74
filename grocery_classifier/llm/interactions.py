"""Utility helpers for building prompts and executing LLM interactions."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from litellm import token_counter
from pydantic import ValidationError as PydanticValidationError
from pydantic_ai import Agent

from ..exceptions import AIError
from ..taxonomy import OTHER_CATEGORY, get_official_categories
from .llm_models import get_model
from .schemas import (
    PRODUCT_CLASSIFICATION_ADAPTER,
    CorrectedNames,
    ProductCategoryPair,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)

# Example products shown next to each slug in the classification prompt.
CATEGORY_EXAMPLES: Dict[str, str] = {
    "vegetables": "tomāti, gurķi, kartupeļi, sīpoli, burkāni",
    "fruits": "āboli, banāni, citrusi, ogas",
    "meat": "liellopa gaļa, vista, desa, maltā gaļa, bekons",
    "fish": "lasis, siļķe, tuncis, garneles",
    "dairy": "piens, siers, jogurts, krējums, biezpiens, sviests",
    "eggs": "olas",
    "bakery": "maize, kliņģeris, kūkas",
    "grains": "rīsi, griķi, makaroni, milti, auzu pārslas",
    "condiments": "sāls, pipari, garšvielas, kečups, majonēze",
    "snacks": "čipsi, saldumi, rieksti, šokolāde",
    "ready_meals": "saldētas picas, pelmeņi, gatavie salāti",
    "beverages": "ūdens, sula, kafija, tēja, limonāde",
    "alcohol": "vīns, alus, degvīns, sidrs",
    "household": "trauku mazgāšanas līdzeklis, tualetes papīrs, atkritumu maisi",
    "hygiene": "zobu pasta, šampūns, ziepes, dezodorants",
    "pet": "suņu barība, kaķu barība",
    "international": "starptautiskie produkti",
    "construction": "krāsa, skrūves, līme",
    OTHER_CATEGORY: "viss pārējais",
}

CLASSIFICATION_RULES = (
    "Noteikumi:\n"
    "- Klasificē pēc pamatprodukta; neņem vērā zīmolu, izcelsmi vai iepakojumu "
    "(\"Valmieras piens\" → dairy, \"spāņu desa\" → meat).\n"
    "- Alkoholiskie dzērieni vienmēr ir alcohol, arī ja tie nosaukti vienkārši "
    "par dzērienu (\"vīns\", \"sarkanvīns\", \"alus\" → alcohol).\n"
    "- Saliktiem nosaukumiem nosaki pamata pārtikas produktu pēc galvenā vārda "
    "(\"ābolu sula\" → beverages, \"biezpiena sieriņš\" → dairy).\n"
    "- Atbildē saglabā produktu secību un nosaukumus tieši tā, kā tie doti."
)


def strip_code_fences(content: str) -> str:
    """Remove Markdown code fences around a JSON answer."""
    return _FENCE_PATTERN.sub("", content).strip()


def build_product_classification_prompt(products: Sequence[str]) -> str:
    """Construct the prompt used to classify a batch of product names."""

    category_lines = [
        f"- {category.slug} ({category.name.lower()}: "
        f"{CATEGORY_EXAMPLES.get(category.slug, category.name.lower())})"
        for category in get_official_categories()
    ]
    categories_section = "\n".join(category_lines)
    product_list = ", ".join(products)

    prompt = f"""Klasificē šos latviešu pārtikas produktus pēc kategorijām:

Kategorijas:
{categories_section}

{CLASSIFICATION_RULES}

Produkti: {product_list}

Atbildi tikai JSON formātā:
[
  {{"product": "produkta_nosaukums", "category": "kategorijas_slug"}},
  ...
]"""

    return prompt


def build_name_correction_prompt(products: Sequence[str]) -> str:
    """Construct the prompt used to fix spelling in product names."""

    product_list = ", ".join(products)

    prompt = f"""Labo šos produktu nosaukumus latviešu valodā: {product_list}

Labo tikai pareizrakstības kļūdas. Zīmolu nosaukumus un aprakstošos vārdus atstāj nemainītus.
Atgriez tieši {len(products)} nosaukumus tādā pašā secībā.

Piemēri:
- "biespiena sieriņš" → "biezpiena sieriņš"
- "apelsinu sulu" → "apelsīnu sula"
- "balto vinu" → "baltais vīns"
- "degvins" → "degvīns"
- "kefirs" → "kefīrs"

Atbildi JSON formātā:
{{
  "correctedNames": ["labots_nosaukums1", "labots_nosaukums2", ...]
}}"""

    return prompt


def validate_prompt_length(prompt: str, model_name: str) -> int:
    """
    Ensure the prompt fits in half of the model's context window.

    Returns:
        The counted prompt tokens (0 when the model has no tokenizer mapping)

    Raises:
        AIError: If the prompt is too long
    """
    model = get_model(model_name)
    if not model.litellm_name:
        return 0

    max_tokens = model.context_length // 2
    messages = [{"role": "user", "content": prompt}]
    prompt_tokens = token_counter(model=model.litellm_name, messages=messages)
    if prompt_tokens > max_tokens:
        raise AIError(
            f"Prompt token count ({prompt_tokens}) exceeds half of the context window ({max_tokens})",
            model=model_name,
            error_type="prompt_too_long",
        )
    return prompt_tokens


async def _run_agent(
    agent: Agent, prompt: str, model_name: Optional[str], timeout: float
) -> str:
    """Run an agent with a timeout and return its raw text output."""
    try:
        response = await asyncio.wait_for(agent.run(prompt), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise AIError(
            f"LLM call timed out after {timeout:.1f}s",
            model=model_name,
            error_type="timeout",
        ) from exc
    except Exception as exc:
        raise AIError(
            f"LLM call failed: {exc}", model=model_name, error_type="network"
        ) from exc

    content = getattr(response, "output", None)
    if not isinstance(content, str) or not content.strip():
        raise AIError("Empty LLM response", model=model_name, error_type="parse")

    return content.strip()


async def classify_products_with_llm(
    *,
    products: Sequence[str],
    agent: Agent,
    model_name: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Tuple[List[ProductCategoryPair], Dict[str, Any]]:
    """
    Classify product names with a single LLM call.

    The returned pairs are aligned with ``products`` by position; categories
    are returned exactly as the model produced them and still need taxonomy
    validation.

    Raises:
        AIError: On network failure, timeout, unparseable or short output
    """
    if not products:
        return [], {"prompt": None, "latency_ms": 0, "model_name": model_name}

    prompt = build_product_classification_prompt(products)
    prompt_tokens = validate_prompt_length(prompt, model_name)

    logger.debug(f"Product classification prompt: {prompt}")

    start_time = time.perf_counter()
    content = await _run_agent(agent, prompt, model_name, timeout)
    latency_ms = int((time.perf_counter() - start_time) * 1000)

    logger.debug(f"Product classification response: {content}")

    try:
        pairs = PRODUCT_CLASSIFICATION_ADAPTER.validate_json(strip_code_fences(content))
    except PydanticValidationError as exc:
        raise AIError(
            f"Could not parse classification response: {exc.errors()[:3]}",
            model=model_name,
            error_type="parse",
        ) from exc

    if len(pairs) < len(products):
        raise AIError(
            f"Expected {len(products)} classifications, got {len(pairs)}",
            model=model_name,
            error_type="incomplete",
        )
    if len(pairs) > len(products):
        logger.warning(
            f"LLM returned {len(pairs)} classifications for {len(products)} products; "
            "ignoring the extra entries"
        )
        pairs = pairs[: len(products)]

    metadata = {
        "prompt": prompt,
        "prompt_tokens": prompt_tokens,
        "latency_ms": latency_ms,
        "timestamp": datetime.now(UTC),
        "model_name": model_name,
        "product_count": len(products),
    }

    logger.info(f"LLM classified {len(pairs)} products in {latency_ms}ms")
    return pairs, metadata


async def correct_names_with_llm(
    *,
    products: Sequence[str],
    agent: Agent,
    model_name: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> List[str]:
    """
    Fix orthographic errors in product names.

    Raises:
        AIError: On network failure, timeout, unparseable output or a list
            whose length does not match the request
    """
    if not products:
        return []

    prompt = build_name_correction_prompt(products)
    validate_prompt_length(prompt, model_name)

    content = await _run_agent(agent, prompt, model_name, timeout)
    logger.debug(f"Name correction response: {content}")

    try:
        corrected = CorrectedNames.model_validate_json(strip_code_fences(content))
    except PydanticValidationError as exc:
        raise AIError(
            f"Could not parse name correction response: {exc.errors()[:3]}",
            model=model_name,
            error_type="parse",
        ) from exc

    if len(corrected.corrected_names) != len(products):
        raise AIError(
            f"Expected {len(products)} corrected names, got {len(corrected.corrected_names)}",
            model=model_name,
            error_type="incomplete",
        )

    return corrected.corrected_names
