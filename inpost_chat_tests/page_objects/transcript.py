"""Record of what a scenario sent and scraped."""

from dataclasses import dataclass, field, asdict
from typing import List

from inpost_chat_tests import console


@dataclass
class ChatTranscript:
    """Messages sent in a scenario and what was scraped back."""
    messages: List[str] = field(default_factory=list)
    responses: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    potential_actions: List[str] = field(default_factory=list)

    @property
    def sent_text(self) -> str:
        """All sent messages joined for echo suppression."""
        return " ".join(self.messages)

    def summary_lines(self) -> List[str]:
        """Human-readable result lines for step logging."""
        lines = [
            f"Messages sent: {console.quoted(self.messages)}",
            f"Bot responses found: {len(self.responses)}",
            f"Action buttons found: {len(self.actions)}",
        ]
        lines += [f"Response {i}: \"{text}\"" for i, text in enumerate(self.responses, 1)]
        lines += [f"Action {i}: \"{text}\"" for i, text in enumerate(self.actions, 1)]
        return lines

    def to_dict(self) -> dict:
        return asdict(self)
