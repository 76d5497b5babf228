"""Mock Anthropic — SDK doubles for the resilient client and provider doubles for the generator.

Invariants:
    - MockAsyncAnthropic.messages.create sequences pre-configured outcomes
      (a _Message is returned, an Exception instance is raised)
    - MockProvider.complete sequences strings/exceptions the same way
    - sdk_error builds REAL anthropic exception instances over httpx responses,
      so isinstance checks in the client behave exactly as in production

Design Decisions:
    - Flat mock classes (no inheritance): simple, explicit, easy to debug
    - Every call recorded in .calls for assertions on prompts and retries
"""

import httpx

_API_URL = "https://api.anthropic.com/v1/messages"


# -- Mock Anthropic SDK objects ------------------------------------------------


class _Block:
    """Mock content block (text or any other type)."""

    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)


class _Usage:
    def __init__(self, input_tokens=100, output_tokens=50):
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens


class _Message:
    """Mock Message returned by messages.create()."""

    def __init__(self, content, stop_reason="end_turn", tokens=(100, 50)):
        self.content = content
        self.stop_reason = stop_reason
        self.usage = _Usage(*tokens)


def _next_outcome(owner, kwargs):
    owner.calls.append(kwargs)
    if owner._idx >= len(owner.outcomes):
        raise RuntimeError(
            f"{type(owner).__name__}: no outcome at index {owner._idx} "
            f"(configured {len(owner.outcomes)})",
        )
    outcome = owner.outcomes[owner._idx]
    owner._idx += 1
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome


class _MockMessages:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self._idx = 0
        self.calls = []

    async def create(self, **kwargs):
        return _next_outcome(self, kwargs)


class MockAsyncAnthropic:
    """Replaces anthropic.AsyncAnthropic inside ResilientAnthropicClient."""

    def __init__(self, outcomes):
        self.messages = _MockMessages(outcomes)


class MockProvider:
    """Replaces ResilientAnthropicClient for the generator and the routes."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self._idx = 0
        self.calls = []

    async def complete(self, *, system, prompt, context=None):
        return _next_outcome(
            self, {"system": system, "prompt": prompt, "context": context},
        )


# -- Builder helpers -----------------------------------------------------------


def text_message(*texts, tokens=(100, 50)):
    """Message with one text block per argument."""
    return _Message([_Block(type="text", text=t) for t in texts], tokens=tokens)


def sdk_error(cls, status_code, message="error", body=None, headers=None):
    """Real anthropic APIStatusError subclass instance for `status_code`."""
    response = httpx.Response(
        status_code,
        headers=headers or {},
        request=httpx.Request("POST", _API_URL),
    )
    return cls(message, response=response, body=body)


def sdk_request():
    return httpx.Request("POST", _API_URL)


def sheet_markdown(*titles, word="Fiche", body_chars=120):
    """Provider-style Markdown with one '## <word> N — title' section per title."""
    filler = "Point clé à retenir pour la révision. " * (body_chars // 38 + 1)
    return "\n\n".join(
        f"## {word} {i} — {title}\n\n{filler.strip()}"
        for i, title in enumerate(titles, start=1)
    )
