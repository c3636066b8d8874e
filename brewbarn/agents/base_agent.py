"""BaseAgent interface for all agents."""
from abc import ABC, abstractmethod
from typing import Dict, Any
from ..schemas.io_models import AgentResult, CustomerContext

class BaseAgent(ABC):
    name: str = "base"

    @abstractmethod
    def handle(self, query: str, customer: CustomerContext) -> AgentResult:
        """Return structured facts; no tone or final prose here."""
        ...

    def _ok(self, intent: str, facts: Dict[str, Any]) -> AgentResult:
        return AgentResult(agent=self.name, intent=intent, facts=facts)
