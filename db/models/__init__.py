from db.models.agent_memory import AgentMemory
from db.models.beta_application import BetaApplication
from db.models.chat_message import ChatMessage
from db.models.todo import Todo

__all__ = ["AgentMemory", "BetaApplication", "ChatMessage", "Todo"]
