from __future__ import annotations

import logging

from tpo.application.dto.responses import SubmitOrderResponse
from tpo.application.mappers.composition_mapper import to_totals_response
from tpo.application.metrics.composition import record_collaborator_failure, record_submission
from tpo.application.ports.collaborators import CollaboratorUnavailableError, OrderSubmitter
from tpo.application.ports.sessions import CompositionStore
from tpo.application.use_cases.context import TraceContext
from tpo.application.use_cases.get_composition import load_session
from tpo.domain.common.ids import CompositionId
from tpo.domain.order.reconcile import reconcile
from tpo.domain.order.submission import (
    BranchRequiredError,
    NoSubmittableRowsError,
    OwnerRequiredError,
    OwnerWithoutBranchError,
    build_submission,
)

logger = logging.getLogger(__name__)

_VALIDATION_ERRORS = (
    NoSubmittableRowsError,
    BranchRequiredError,
    OwnerRequiredError,
    OwnerWithoutBranchError,
)


class SubmitOrder:
    def __init__(self, store: CompositionStore, submitter: OrderSubmitter) -> None:
        self._store = store
        self._submitter = submitter

    def execute(self, composition_id: CompositionId, trace_ctx: TraceContext) -> SubmitOrderResponse:
        session = load_session(self._store, composition_id)
        composition = session.composition
        mode = "edit" if composition.is_edit else "new"

        try:
            submission = build_submission(composition, session.role)
        except _VALIDATION_ERRORS:
            record_submission(mode, "rejected")
            raise

        try:
            if composition.order_id is not None:
                order_id = self._submitter.update(composition.order_id, submission)
            else:
                order_id = self._submitter.create(submission)
        except CollaboratorUnavailableError as exc:
            record_collaborator_failure(exc.operation)
            record_submission(mode, "failed")
            logger.warning(
                "order_submit_failed",
                extra={
                    "composition_id": composition_id,
                    "mode": mode,
                    "error": str(exc),
                    "request_id": trace_ctx.request_id,
                },
            )
            raise

        totals = reconcile(composition.rows, composition.rate_set)
        self._store.delete(composition_id)
        record_submission(mode, "success", len(submission.items))
        logger.info(
            "order_submitted",
            extra={
                "composition_id": composition_id,
                "order_id": order_id,
                "mode": mode,
                "item_count": len(submission.items),
                "request_id": trace_ctx.request_id,
            },
        )
        return SubmitOrderResponse(
            orderId=str(order_id),
            mode=mode,
            itemCount=len(submission.items),
            totals=to_totals_response(totals),
        )
