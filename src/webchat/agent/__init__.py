"""External agent invocation."""

from webchat.agent.executor import CommandExecutor, CommandResult, CommandSpec, SubprocessExecutor
from webchat.agent.invoker import AgentInvoker, AgentReply

__all__ = [
    "AgentInvoker",
    "AgentReply",
    "CommandExecutor",
    "CommandResult",
    "CommandSpec",
    "SubprocessExecutor",
]
