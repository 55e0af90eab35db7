"""FastAPI integration — run the startup gate in the app's lifespan.

    app = FastAPI(lifespan=runtime_check_lifespan(Checks()))

If a check fails the lifespan raises ``RuntimeCheckFailed`` and the server
never starts serving.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from fastapi import FastAPI

from .gate import RuntimeCheck

logger = logging.getLogger(__name__)

Lifespan = Callable[[FastAPI], AbstractAsyncContextManager[Any]]


def runtime_check_lifespan(gate: RuntimeCheck, inner: Lifespan | None = None) -> Lifespan:
    """Build a lifespan that runs ``gate`` before ``inner`` (if any).

    The gate's outcome is stored on ``app.state.runtime_check`` (``None``
    when the gate is disabled).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[Any]:
        # Checks are blocking; keep them off the event loop
        await asyncio.to_thread(gate.start)
        app.state.runtime_check = gate.outcome
        logger.debug("Startup checks cleared for %s", type(gate).__name__)

        if inner is None:
            yield
            return

        async with inner(app) as state:
            yield state

    return lifespan
