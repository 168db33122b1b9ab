"""Data-access requests.

A request records who asked, the research topic, a wrapped budget and a
deadline. Fulfillment (``is_fulfilled`` and ``approved_datasets``) is left to
a future workflow and never changes here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.config import CoreSettings
from ..core.events import DataRequested, RegistryEvent
from ..core.exceptions import NotFoundError, ValidationError
from ..core.guards import check, require
from ..core.models import DataRequest, RequestPublicView
from ..core.sequence import REQUEST, SequenceAllocator
from ..core.store import RegistryState
from ..privacy.oracle import EncryptionOracleClient

logger = logging.getLogger(__name__)


class RequestLedger:
    def __init__(
        self,
        state: RegistryState,
        sequence: SequenceAllocator,
        oracle: EncryptionOracleClient,
        emit: Callable[[RegistryEvent], None],
        clock: Callable[[], int],
        settings: CoreSettings,
    ):
        self.state = state
        self.sequence = sequence
        self.oracle = oracle
        self.emit = emit
        self.clock = clock
        self.settings = settings

    def submit(self, requester: str, topic: str, plain_budget: int, deadline: int) -> int:
        """Record a request for data access and return its id.

        Raises:
            ValidationError: If the topic is empty or the deadline is not in the future.
        """
        now = self.clock()
        require(
            check(
                bool(topic),
                "Research topic required",
                lambda: ValidationError("Research topic required", field="topic"),
            ),
            check(
                deadline > now,
                "Deadline must be in future",
                lambda: ValidationError("Deadline must be in future", field="deadline", value=deadline),
            ),
        )

        budget_handle = self.oracle.wrap(plain_budget, self.settings.budget_bit_width)
        self.oracle.allow_self(budget_handle)
        self.oracle.allow_principal(budget_handle, requester)

        request_id = self.sequence.next(REQUEST)
        request = DataRequest(
            id=request_id,
            requester=requester,
            topic=topic,
            budget_handle=budget_handle,
            deadline=deadline,
        )
        self.state.add_request(request)

        self.emit(DataRequested(request_id=request_id, requester=requester, topic=topic))
        logger.info(f"Data request {request_id} submitted by {requester} (deadline={deadline})")
        return request_id

    def get(self, request_id: int) -> DataRequest:
        require(
            check(
                1 <= request_id < self.state.counters[REQUEST] and request_id in self.state.requests,
                "Invalid request ID",
                lambda: NotFoundError("request", request_id),
            )
        )
        return self.state.requests[request_id]

    def get_info(self, request_id: int) -> RequestPublicView:
        return self.get(request_id).public_view()
