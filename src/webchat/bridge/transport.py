"""Transport adapter between the host and a script environment."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from loguru import logger

from webchat.bridge.messages import Bootstrap

MESSAGE_HANDLER_NAME = "webchat"
RECEIVE_ENTRY = "__webchatReceive"
SEND_ENTRY = "__webchatSend"
LOG_ENTRY = "__webchatLog"
BOOTSTRAP_GLOBAL = "__webchatBootstrap"
ENQUEUE_OUTGOING_ENTRY = "__webchatEnqueueOutgoing"

MessageHandler = Callable[[Any], None]


class ScriptEnvironment(Protocol):
    """Minimal contract the host needs from a hosted script environment."""

    def install(self, bootstrap: Bootstrap, on_message: MessageHandler) -> None: ...

    async def call_global(self, name: str, argument: Any) -> Any: ...


async def deliver_to_script(environment: ScriptEnvironment, entry_point: str, value: Any) -> bool:
    """Invoke a script global, logging instead of raising when the environment cannot take it."""

    try:
        await environment.call_global(entry_point, value)
    except Exception as exc:
        logger.warning("bridge.deliver_failed entry={} error={}", entry_point, exc)
        return False
    return True


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def render_call(name: str, argument: Any) -> str:
    return f"window.{name}({_to_json(argument)})"


def render_prelude() -> str:
    """Script that installs the callback map, send/receive/log globals and console forwarding."""

    handler = f"window.webkit?.messageHandlers?.{MESSAGE_HANDLER_NAME}"
    return f"""
window.__webchatCallbacks = new Map();
window.{RECEIVE_ENTRY} = function(resp) {{
  const entry = window.__webchatCallbacks.get(resp.id);
  if (!entry) return;
  window.__webchatCallbacks.delete(resp.id);
  if (resp.ok) {{
    entry.resolve(resp.result);
  }} else {{
    entry.reject(resp.error || 'unknown error');
  }}
}};
window.{SEND_ENTRY} = function(payload) {{
  const id = crypto.randomUUID();
  return new Promise((resolve, reject) => {{
    window.__webchatCallbacks.set(id, {{ resolve, reject }});
    {handler}?.postMessage({{ id, ...payload }});
  }});
}};
window.{LOG_ENTRY} = function(msg) {{
  try {{
    {handler}?.postMessage({{ id: 'log', log: String(msg) }});
  }} catch (_) {{}}
}};
const __webchatConsoleLog = console.log;
console.log = function(...args) {{
  try {{ window.{LOG_ENTRY}(args.join(' ')); }} catch (_) {{}}
  __webchatConsoleLog.apply(console, args);
}};
window.addEventListener('error', (e) => {{
  try {{ window.{LOG_ENTRY}(`page error: ${{e.message}} @ ${{e.filename}}:${{e.lineno}}:${{e.colno}}`); }} catch (_) {{}}
}});
window.addEventListener('unhandledrejection', (e) => {{
  try {{ window.{LOG_ENTRY}(`unhandled rejection: ${{e.reason}}`); }} catch (_) {{}}
}});
""".strip()


def render_bootstrap(bootstrap: Bootstrap) -> str:
    return f"window.{BOOTSTRAP_GLOBAL} = {_to_json(bootstrap.to_wire())};"


class JavaScriptEnvironment:
    """Adapter for a web view that exposes script evaluation and message handlers.

    The three callables map onto the usual web view primitives: evaluating an
    expression, adding a script that runs at document start, and registering
    a named handler that receives posted message bodies.
    """

    def __init__(
        self,
        evaluate: Callable[[str], Awaitable[Any]],
        add_user_script: Callable[[str], None],
        add_message_handler: Callable[[str, MessageHandler], None],
    ) -> None:
        self._evaluate = evaluate
        self._add_user_script = add_user_script
        self._add_message_handler = add_message_handler

    def install(self, bootstrap: Bootstrap, on_message: MessageHandler) -> None:
        self._add_user_script(render_prelude())
        self._add_user_script(render_bootstrap(bootstrap))
        self._add_message_handler(MESSAGE_HANDLER_NAME, on_message)

    async def call_global(self, name: str, argument: Any) -> Any:
        return await self._evaluate(render_call(name, argument))
