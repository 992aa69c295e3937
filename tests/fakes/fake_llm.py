"""Fake completion client for chat tests."""

from profile_assistant.core.llm import CompletionClient


class FakeCompletionClient(CompletionClient):
    """Returns a canned reply (or raises) and records every prompt."""

    def __init__(self, reply: str = "Hi", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply
