"""
Skill invocation.

The emulator talks to a skill only through the ``SkillInteractor`` protocol:
``await interactor.invoke(request_json)`` returns the skill's response JSON.
Two implementations are provided:

- ``LocalSkillInteractor`` calls a handler function in-process, the way a
  Lambda runtime would: ``handler(event, context)``. The handler may be a
  plain function or a coroutine function.
- ``RemoteSkillInteractor`` POSTs the request to a skill endpoint with httpx.
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

import httpx

from skill_emulator.errors import SkillInvocationError

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any], "LambdaContext"], Any]

DEFAULT_FUNCTION = "handler"


@runtime_checkable
class SkillInteractor(Protocol):
    """Anything that can deliver a request to a skill and return its response."""

    async def invoke(self, request: dict[str, Any]) -> dict[str, Any]:
        ...


@dataclass
class LambdaContext:
    """The context object handed to a local handler alongside the event."""

    function_name: str = "skill-emulator"
    function_version: str = "N/A"
    invoked_function_arn: str = "N/A"
    memory_limit_in_mb: int = -1
    aws_request_id: str = "N/A"
    log_group_name: str = "N/A"
    log_stream_name: str | None = None
    identity: Any = None
    client_context: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    def get_remaining_time_in_millis(self) -> int:
        return -1


# ---------------------------------------------------------------------------
# Local handler
# ---------------------------------------------------------------------------


def resolve_handler(reference: str) -> Handler:
    """Turn a handler reference into a callable.

    Two forms are accepted:

    - ``"path/to/index.py"``: the file's ``handler`` function.
    - ``"package.module.function"``: imported from ``sys.path`` (the current
      working directory first).

    Raises:
        SkillInvocationError: If the module or function cannot be found.
    """
    if reference.endswith(".py"):
        path = Path(reference).resolve()
        if not path.is_file():
            raise SkillInvocationError(f"Handler file not found: {path}")
        module_spec = importlib.util.spec_from_file_location(path.stem, path)
        module = importlib.util.module_from_spec(module_spec)
        module_spec.loader.exec_module(module)
        function_name = DEFAULT_FUNCTION
    else:
        module_name, sep, function_name = reference.rpartition(".")
        if not sep:
            raise SkillInvocationError(
                f"Handler must be 'module.function' or a .py file, got: {reference}"
            )
        cwd = str(Path.cwd())
        if cwd not in sys.path:
            sys.path.insert(0, cwd)
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            raise SkillInvocationError(f"Handler module not found: {module_name}") from exc

    function = getattr(module, function_name, None)
    if not callable(function):
        raise SkillInvocationError(f"Handler function not found: {reference}")
    return function


class LocalSkillInteractor:
    """Invoke a handler function in-process.

    Args:
        handler: The handler itself, or a reference resolved by
            :func:`resolve_handler` on first use.
    """

    def __init__(self, handler: Handler | str) -> None:
        self._handler = handler

    @property
    def handler(self) -> Handler:
        if isinstance(self._handler, str):
            self._handler = resolve_handler(self._handler)
        return self._handler

    async def invoke(self, request: dict[str, Any]) -> dict[str, Any]:
        """Call the handler. Exceptions raised by the handler propagate unchanged.

        Raises:
            SkillInvocationError: If the handler returns nothing.
        """
        result = self.handler(request, LambdaContext())
        if inspect.isawaitable(result):
            result = await result
        if result is None:
            raise SkillInvocationError("Skill handler returned no response")
        return result


# ---------------------------------------------------------------------------
# Remote skill
# ---------------------------------------------------------------------------


class RemoteSkillInteractor:
    """POST requests to a skill endpoint.

    Args:
        url: Skill endpoint URL.
        timeout: Seconds to wait for a response, or ``None`` to wait forever.
        transport: Optional httpx transport, e.g. ``httpx.ASGITransport`` to
            drive an in-process ASGI app.
    """

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def invoke(self, request: dict[str, Any]) -> dict[str, Any]:
        """Send the request and parse the JSON reply.

        Raises:
            SkillInvocationError: On a transport failure, a non-200 status, or
                a body that is not JSON.
        """
        logger.debug("POST %s", self.url)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.url,
                    content=json.dumps(request),
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as exc:
                raise SkillInvocationError(f"Skill request failed: {exc}") from exc

        if response.status_code != 200:
            raise SkillInvocationError(
                f"Invalid response: {response.status_code} Message: {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise SkillInvocationError(f"Skill returned invalid JSON: {exc}") from exc
