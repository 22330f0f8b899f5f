"""Prompt construction for the category/payment-mode suggestion call.

Builds the system instructions, the user content describing one entry, and
the strict ``response_format`` (JSON Schema) object for the OpenAI Responses
API.
"""

from __future__ import annotations

from collections.abc import Sequence

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .categories import ALL_CATEGORIES, ALL_PAYMENT_MODES
from .models import SuggestionContext


def build_system_instructions(
    categories: Sequence[str] = ALL_CATEGORIES,
    payment_modes: Sequence[str] = ALL_PAYMENT_MODES,
) -> str:
    return (
        "You are an AI financial assistant specializing in small business cash flow. "
        "Based on the provided transaction details, suggest the most appropriate "
        f"'category' from the following list: {', '.join(categories)} and 'paymentMode' "
        f"from this list: {', '.join(payment_modes)}. Assume 'in' transactions are revenue "
        "and 'out' transactions are expenses. Output JSON only that conforms to the "
        "specified schema."
    )


def build_user_content(context: SuggestionContext) -> str:
    return (
        "I have a cashbook entry. "
        f"Transaction type: {context.type}. "
        f"Contact: {context.contact}. "
        f"Remark: {context.remark}. "
        f"Amount: {context.amount or 'N/A'}. "
        "Suggest the best category and payment mode."
    )


def build_response_format(
    categories: Sequence[str] = ALL_CATEGORIES,
    payment_modes: Sequence[str] = ALL_PAYMENT_MODES,
) -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response format.

    Shape::

        {"suggestedCategory": <one of categories>,
         "suggestedPaymentMode": <one of payment_modes>}
    """

    if not categories or not payment_modes:
        raise ValueError("categories and payment_modes must be non-empty")

    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "cashbook_suggestion",
        "schema": {
            "type": "object",
            "properties": {
                "suggestedCategory": {"type": "string", "enum": list(categories)},
                "suggestedPaymentMode": {"type": "string", "enum": list(payment_modes)},
            },
            "required": ["suggestedCategory", "suggestedPaymentMode"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result
