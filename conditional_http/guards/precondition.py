"""Precondition guard dependency for FastAPI routes.

Builds a dependency that loads the target resource's version descriptor,
evaluates the request's conditional headers against it and short-circuits
with a problem+json response (or a bare 304) when the request may not
proceed. Blocked responses carry ``ETag``/``Last-Modified`` for the current
version so clients can resynchronise.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from fastapi import HTTPException, Request

from conditional_http.config import PreconditionConfig, load_config
from conditional_http.logic.evaluator import PreconditionEvaluator
from conditional_http.logic.header_emitter import validator_headers
from conditional_http.logic.problem_factory import problem_for_result
from conditional_http.models.precondition import PreconditionResult, VersionDescriptor


logger = logging.getLogger(__name__)

DescriptorLoader = Callable[
    [Request], Union[Optional[VersionDescriptor], Awaitable[Optional[VersionDescriptor]]]
]


def raise_for_result(result: PreconditionResult, descriptor: VersionDescriptor) -> None:
    """Raise the HTTPException matching a non-passing result; no-op when passed."""
    if result.passed:
        return
    problem = problem_for_result(result)
    status = int(problem["status"])
    logger.info(
        "precondition.fail",
        extra={"status": status, "code": problem["code"], "outcome": result.status},
    )
    raise HTTPException(status_code=status, detail=problem, headers=validator_headers(descriptor))


def precondition_guard(
    load_descriptor: DescriptorLoader,
    config: Optional[PreconditionConfig] = None,
    evaluator: Optional[PreconditionEvaluator] = None,
) -> Callable[[Request], Awaitable[Optional[VersionDescriptor]]]:
    """Return a FastAPI dependency enforcing preconditions for one resource kind.

    ``load_descriptor`` receives the request and returns the resource's
    current ``VersionDescriptor`` (sync or async). Returning None means the
    resource does not take part in preconditions and the request continues.
    The dependency returns the descriptor so handlers can emit validators.
    """
    settings = config or load_config().precondition
    engine = evaluator or PreconditionEvaluator(classifier=settings.classifier())

    async def guard(request: Request) -> Optional[VersionDescriptor]:
        loaded = load_descriptor(request)
        descriptor = await loaded if inspect.isawaitable(loaded) else loaded
        if descriptor is None:
            logger.info(
                "precondition.skipped",
                extra={"method": request.method, "path": request.url.path, "reason": "no local version data"},
            )
            return None
        if not settings.responder_enabled:
            return descriptor

        result = engine.evaluate(
            request.headers,
            request.method,
            settings.missing_precondition_result(request.method, engine.classifier),
            descriptor,
        )
        raise_for_result(result, descriptor)
        return descriptor

    return guard


__all__ = ["DescriptorLoader", "raise_for_result", "precondition_guard"]
