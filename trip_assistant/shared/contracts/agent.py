"""
Agent contracts.

Defines the mutation proposals produced by the agent orchestrator, the
conversation messages it consumes, and the itinerary generation responses.
"""

from typing import List, Literal, Optional, Union

from pydantic import Field

from trip_assistant.shared.contracts.events import Event, EventRef, WireModel
from trip_assistant.shared.contracts.query import UsageStats
from trip_assistant.shared.errors import InvalidActionTransitionError


AgentActionType = Literal["create_event", "edit_event", "delete_event"]
AgentActionStatus = Literal["proposed", "confirmed", "rejected"]


class AgentAction(WireModel):
    """
    A reviewable mutation proposal.

    Created in the ``proposed`` status. Moves to ``confirmed`` or
    ``rejected`` only through confirm()/reject(), and never back.
    """

    id: str
    type: AgentActionType
    event: Union[Event, EventRef]
    reason: Optional[str] = None
    status: AgentActionStatus = "proposed"

    def confirm(self) -> "AgentAction":
        return self._transition("confirmed")

    def reject(self) -> "AgentAction":
        return self._transition("rejected")

    def _transition(self, status: AgentActionStatus) -> "AgentAction":
        if self.status != "proposed":
            raise InvalidActionTransitionError(
                f"Action {self.id} is already {self.status}; cannot mark it {status}"
            )
        return self.model_copy(update={"status": status})


class AgentMessage(WireModel):
    """A single conversation turn."""

    role: Literal["system", "user", "assistant"]
    content: str
    actions: Optional[List[AgentAction]] = None


class AgentChatResponse(UsageStats):
    """Result of one agent turn."""

    reply: str
    actions: List[AgentAction] = Field(default_factory=list)


class GenerateItineraryResponse(UsageStats):
    """Result of a non-streaming itinerary generation."""

    events: List[Event] = Field(default_factory=list)
    reply: str


class GenerationSummary(UsageStats):
    """Terminal summary of a streaming itinerary generation."""

    reply: str
    event_count: int = 0
