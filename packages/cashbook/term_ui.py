"""Tiny terminal UI helpers (prompt_toolkit-based).

Small, focused prompts for the interactive ``cashbook add`` flow, kept apart
from the engine so they are easy to test with piped input.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

_STYLE = Style.from_dict({"auto-suggestion": "fg:#888888"})


def _best_prefix_match(words: Sequence[str], text: str) -> str | None:
    """Return the first word that strictly extends ``text`` (case-insensitive)."""

    if not text:
        return None
    lower = text.lower()
    for w in words:
        wl = w.lower()
        if wl == lower:
            return None
        if wl.startswith(lower):
            return w
    return None


class _PrefixSuggest(AutoSuggest):
    def __init__(self, vocab: Sequence[str]) -> None:
        self._vocab = list(vocab)

    def get_suggestion(self, buffer, document):
        text = document.text
        cand = _best_prefix_match(self._vocab, text)
        if cand is None:
            return None
        return Suggestion(cand[len(text) :])


class _MemberValidator(Validator):
    def __init__(self, vocab: Sequence[str]) -> None:
        self._lower = {w.lower() for w in vocab}
        self._display = ", ".join(vocab)

    def validate(self, document) -> None:
        text = document.text.strip()
        if text and text.lower() not in self._lower:
            raise ValidationError(message=f"Choose one of: {self._display}")


def _session(session: PromptSession | None, kb: KeyBindings) -> PromptSession:
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def select_choice(
    choices: Sequence[str] | Iterable[str],
    *,
    default: str,
    message: str = "Choose (Enter to accept): ",
    session: PromptSession | None = None,
) -> str:
    """Prompt for one member of a fixed set, pre-filled with ``default``.

    Completion is case-insensitive; Enter on a strict prefix accepts the first
    matching member. Returns the member with its canonical casing; an empty
    answer returns ``default``.
    """

    words = list(choices)
    by_lower = {w.lower(): w for w in words}

    kb = KeyBindings()

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cand = _best_prefix_match(words, b.document.text)
        if cand:
            b.insert_text(cand[len(b.document.text) :])
        elif b.complete_state is None:
            b.start_completion(select_first=True)
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
        else:
            cand = _best_prefix_match(words, b.document.text)
            if cand:
                b.insert_text(cand[len(b.document.text) :])
        b.validate_and_handle()

    result = _session(session, kb).prompt(
        message,
        completer=WordCompleter(words, ignore_case=True, match_middle=True),
        default=default,
        auto_suggest=_PrefixSuggest(words),
        validator=_MemberValidator(words),
        validate_while_typing=False,
        style=_STYLE,
    )
    result = result.strip()
    if not result:
        return default
    return by_lower.get(result.lower(), default)


def prompt_text(
    message: str,
    *,
    default: str = "",
    session: PromptSession | None = None,
) -> str:
    """Free-text prompt; returns the stripped answer."""

    return _session(session, KeyBindings()).prompt(message, default=default).strip()


__all__ = ["prompt_text", "select_choice"]
