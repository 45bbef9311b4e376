# ess/adapters/web/fastapi.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

import uuid

from fastapi import FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ess.core.exceptions import (
    ConfigurationError,
    ExpertSearchError,
    RemoteInitiationError,
    SubmissionValidationError,
)
from ess.core.interfaces.http_client import HttpClientPort
from ess.core.logging_config import correlation_id_var
from ess.core.managers.orchestrator import Orchestrator
from ess.core.models.api import (
    ExpertSearchRequest,
    ExpertSearchResponse,
    HealthResponse,
    JobView,
)
from ess.core.models.problem import ProblemResponse
from ess.core.settings import logger


# Driver adapter: depends on the core Orchestrator, the core does not depend on it.
def create_app(
    orchestrator_factory: Callable[[HttpClientPort], Orchestrator],
    http_client: HttpClientPort,
    cors_origins: Optional[Sequence[str]] = None,
):
    """Create the FastAPI app.

    Concrete infrastructure (HTTP client, search API, store) is assembled by
    the composition root and handed in as a factory. The HTTP client session
    lives as long as the app; shutting the app down cancels every poller.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with http_client as client:
            orchestrator = orchestrator_factory(client)
            app.state.orchestrator = orchestrator
            try:
                yield
            finally:
                await orchestrator.shutdown()

    app = FastAPI(title="Expert Search Service", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins or ["*"]),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def render_problem(problem: ProblemResponse) -> JSONResponse:
        cid = correlation_id_var.get()
        if cid != "-":
            problem = problem.with_request_id(cid)
        payload = jsonable_encoder(problem.model_dump(exclude_none=True))
        return JSONResponse(status_code=problem.status, content=payload)

    # Correlation ID middleware: assigns per-request id (header override) and exposes it to logging
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        incoming = request.headers.get("x-request-id")
        cid = incoming or uuid.uuid4().hex[:12]
        token = correlation_id_var.set(cid)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)
        response.headers["X-Request-ID"] = cid
        return response

    @app.exception_handler(SubmissionValidationError)
    async def handle_validation(request: Request, exc: SubmissionValidationError):
        return render_problem(
            ProblemResponse(title="Bad Request", status=400, detail=exc.message, instance=str(request.url))
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration(request: Request, exc: ConfigurationError):
        return render_problem(
            ProblemResponse(title="Configuration Error", status=500, detail=exc.message, instance=str(request.url))
        )

    @app.exception_handler(RemoteInitiationError)
    async def handle_initiation(request: Request, exc: RemoteInitiationError):
        status = exc.upstream_status if exc.upstream_status and exc.upstream_status >= 400 else 500
        return render_problem(
            ProblemResponse(
                title=exc.message,
                status=status,
                detail=exc.diagnostic or exc.message,
                instance=str(request.url),
            )
        )

    @app.exception_handler(ExpertSearchError)
    async def handle_expert_search_error(request: Request, exc: ExpertSearchError):
        logger.error(f"[web:error] unhandled {type(exc).__name__} error={exc}")
        return render_problem(
            ProblemResponse(title="Internal Server Error", status=500, detail=exc.message, instance=str(request.url))
        )

    @app.post("/expert-search", response_model=ExpertSearchResponse)
    async def expert_search(
        body: ExpertSearchRequest,
        x_call_id: Optional[str] = Header(default=None),
    ):
        result = await app.state.orchestrator.submit(
            body.search_query,
            user_name=body.user_first_name,
            project_id=body.project_id,
            call_id=x_call_id,
        )
        return ExpertSearchResponse(search_id=result.remote_job_id, call_id=result.call_id)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        status = app.state.orchestrator.health()
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            active_polling=status.active_job_count,
        )

    @app.get("/jobs/{call_id}", response_model=JobView)
    async def get_job(request: Request, call_id: str):
        context = app.state.orchestrator.get_job(call_id)
        if context is None:
            return render_problem(
                ProblemResponse(
                    title="Job Not Found",
                    status=404,
                    detail=f"No active job for call id '{call_id}'",
                    instance=str(request.url),
                )
            )
        return JobView.model_validate(context.model_dump())

    @app.get("/results/latest")
    async def latest_result(request: Request):
        envelope = app.state.orchestrator.last_completed
        if envelope is None:
            return render_problem(
                ProblemResponse(
                    title="No Results",
                    status=404,
                    detail="No search has completed yet",
                    instance=str(request.url),
                )
            )
        return JSONResponse(content=jsonable_encoder(envelope))

    return app
