from typing import List

from fastapi import APIRouter, Path, Request

from api.models import HealthResponse, MeasureResponse, ReportResponse
from observability.logging import get_json_logger
from observability.tracing import get_current_transaction, measured
from observability.tracing import tracer as tracing_setup

router = APIRouter()
logger = get_json_logger(__name__)


def sum_of_squares(n: int) -> int:
    return sum(i * i for i in range(n))


@measured("Render report section", "template.render")
def render_section(title: str, rows: int) -> str:
    return f"{title}: {rows} rows"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health",
    description="Service health and tracing status.",
    tags=["Health"],
)
def health_endpoint():
    current = get_current_transaction()
    return HealthResponse(
        tracing="enabled" if tracing_setup.tracer_provider is not None else "disabled",
        current_transaction=current.name if current is not None else None,
    )


@router.get(
    "/measure/{n}",
    response_model=MeasureResponse,
    summary="Measured computation",
    description="Sum the squares below n inside a span of the request transaction.",
    tags=["Demo"],
)
def measure_endpoint(request: Request, n: int = Path(..., ge=0, le=1_000_000)):
    transaction = getattr(request.state, "transaction", None)
    if transaction is not None:
        result = transaction.measure("Sum of squares", "compute", sum_of_squares, (n,))
    else:
        result = sum_of_squares(n)
    logger.info("measured computation", extra={"n": n})
    return MeasureResponse(
        n=n,
        result=result,
        transaction=transaction.name if transaction is not None else None,
    )


@router.get(
    "/report",
    response_model=ReportResponse,
    summary="Report",
    description="Build a small report; each section is rendered in its own span.",
    tags=["Demo"],
)
def report_endpoint():
    transaction = get_current_transaction()
    sections: List[str] = []
    if transaction is not None:
        with transaction.span("db.query", "Load report rows"):
            rows = {"orders": 3, "refunds": 1}
    else:
        rows = {"orders": 3, "refunds": 1}
    for title, count in rows.items():
        sections.append(render_section(title, count))
    return ReportResponse(
        transaction=transaction.name if transaction is not None else None,
        sections=sections,
        total=sum(rows.values()),
    )
