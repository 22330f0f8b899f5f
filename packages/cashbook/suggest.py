"""Category/payment-mode suggestion via the OpenAI Responses API.

Public API:
    - :func:`suggest_fields`

The suggestion is advisory. Failures never raise past this module once the
request is attempted: after the retry budget is spent (or on a terminal
error) the result is ``None`` and the caller keeps its current field values.
Values in a successful result are not trusted here; callers validate them
against the fixed sets before applying (see ``reconcile.apply_suggestion``).
"""

from __future__ import annotations

import json
import os
import random
import time
from collections.abc import Mapping
from typing import Any

from openai import APIConnectionError, OpenAI
from pydantic import ValidationError

from . import prompting
from .errors import EntryValidationError
from .logging_setup import get_logger
from .models import FieldSuggestion, SuggestionContext

# ---- Tunables (private) ------------------------------------------------------

_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (1.0, 2.0)
_JITTER_PCT: float = 0.20
_DEFAULT_MODEL: str = "gpt-5-mini"

_logger = get_logger("cashbook.suggest")


def _model_name() -> str:
    return os.getenv("CASHBOOK_SUGGEST_MODEL") or _DEFAULT_MODEL


def _create_client() -> OpenAI:
    return OpenAI()


def _extract_response_json_mapping(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON object from a Responses SDK result.

    Prefers ``resp.output_text``; falls back to ``resp.output[0].content[0].text``.
    Raises ``ValueError`` when no text is found or it is not a JSON object.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        try:
            first = resp.output[0] if getattr(resp, "output", None) else None
            content = getattr(first, "content", None)
            if content:
                txt_obj = getattr(content[0], "text", None)
                text = txt_obj if isinstance(txt_obj, str) else getattr(txt_obj, "value", None)
        except (AttributeError, IndexError, TypeError):
            text = None
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Model output was not a JSON object")
    return decoded


def _is_retryable(exc: BaseException) -> bool:
    """Retry HTTP 429/5xx and connection failures only."""

    if isinstance(exc, APIConnectionError):
        return True
    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    if attempt_no - 1 < len(_BACKOFF_SCHEDULE_SEC):
        base = _BACKOFF_SCHEDULE_SEC[attempt_no - 1]
    else:
        base = _BACKOFF_SCHEDULE_SEC[-1]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


def suggest_fields(
    context: SuggestionContext,
    *,
    client: OpenAI | None = None,
) -> FieldSuggestion | None:
    """Ask the model for a category and payment mode for one entry.

    Requires a contact or a remark to describe the entry; raises
    ``EntryValidationError`` otherwise (no request is made). Returns ``None``
    when the request fails terminally or exhausts its retries.
    """

    if not context.contact.strip() and not context.remark.strip():
        raise EntryValidationError(
            "contact", "Please enter a contact or remark to get suggestions."
        )

    instructions = prompting.build_system_instructions()
    user_content = prompting.build_user_content(context)
    response_format = prompting.build_response_format()

    try:
        client = client or _create_client()
    except Exception as e:  # noqa: BLE001 - missing key/config is a failed suggestion
        _logger.error("suggest:client_unavailable error=%s", e.__class__.__name__)
        return None

    attempt = 1
    while True:
        t0 = time.perf_counter()
        try:
            resp = client.responses.create(
                model=_model_name(),
                instructions=instructions,
                input=user_content,
                text={"format": response_format},
            )
            suggestion = FieldSuggestion.model_validate(_extract_response_json_mapping(resp))
            _logger.info(
                "suggest:done category=%s payment_mode=%s latency_ms=%.2f",
                suggestion.suggested_category,
                suggestion.suggested_payment_mode,
                (time.perf_counter() - t0) * 1000.0,
            )
            return suggestion
        except (ValueError, ValidationError) as e:
            # Malformed model output is terminal (no retries).
            _logger.error("suggest:bad_output error=%s", e)
            return None
        except Exception as e:  # noqa: BLE001
            dt_ms = (time.perf_counter() - t0) * 1000.0
            if attempt >= _MAX_ATTEMPTS or not _is_retryable(e):
                _logger.error(
                    "suggest:failed_terminal attempts=%d latency_ms=%.2f error=%s",
                    attempt,
                    dt_ms,
                    e.__class__.__name__,
                )
                return None
            _logger.warning(
                "suggest:retry attempt=%d latency_ms=%.2f error=%s",
                attempt,
                dt_ms,
                e.__class__.__name__,
            )
            _sleep_backoff(attempt)
            attempt += 1


__all__ = ["suggest_fields"]
