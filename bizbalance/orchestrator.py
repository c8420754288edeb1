"""
Main Orchestrator for BizBalance

This module ties together all the components and defines the flows for:
1. Editing (user action → new state → recompute → persist)
2. AI insight (figures → one request → one result slot)

DESIGN DECISION: The session holds the current BusinessData as a VALUE.
Edits go through the editor functions, which return new collections;
the session swaps in the new BusinessData and tells its listeners.
Persistence is just one of those listeners.

Calculations are never stored. Every read of `calculations` recomputes
from the current state, so the summary cannot drift from the data.
"""

from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from bizbalance.agents import InsightAgent, InsightResponse
from bizbalance.agents.insight_agent import INSIGHT_FAILURE_MESSAGE
from bizbalance.audit import AuditLogger, configure_logging, create_correlation_id
from bizbalance.calculations import calculate, format_bank_breakdown
from bizbalance.config import GeminiSettings, get_settings
from bizbalance.editor import add_to_collection, find_record, remove_record, update_record
from bizbalance.models.finance import (
    BusinessData,
    CalculationResult,
    CollectionName,
    FinancialRecord,
    InvalidPatchError,
    RecordPatch,
)
from bizbalance.reporting import ChartBar, build_chart_data
from bizbalance.services.storage import (
    BusinessDataRepository,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    StorageError,
)

StateListener = Callable[[BusinessData, Optional[UUID]], None]

MISSING_KEY_NOTICE = (
    "Please set a valid GEMINI_API_KEY in your environment to use this feature."
)


class DashboardSession:
    """
    Explicit state container for one dashboard user.

    Flow for every edit:
    1. Editor function builds the new collection
    2. Session replaces the whole BusinessData
    3. Listeners (persistence) are notified
    4. The next read of `calculations` reflects the change

    Edits that change nothing (unknown id) do not notify listeners.
    """

    def __init__(
        self,
        data: BusinessData,
        use_strict_formula: bool = False,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._data = data
        self._use_strict_formula = use_strict_formula
        self._audit_logger = audit_logger
        self._listeners: list[StateListener] = []

    @property
    def data(self) -> BusinessData:
        return self._data

    @property
    def use_strict_formula(self) -> bool:
        return self._use_strict_formula

    @property
    def calculations(self) -> CalculationResult:
        return calculate(self._data, self._use_strict_formula)

    @property
    def chart_data(self) -> list[ChartBar]:
        return build_chart_data(self.calculations)

    def subscribe(self, listener: StateListener) -> None:
        """Register a callable invoked with every new state."""
        self._listeners.append(listener)

    def _commit(self, data: BusinessData, correlation_id: Optional[UUID]) -> None:
        self._data = data
        for listener in self._listeners:
            listener(data, correlation_id)

    def add_record(
        self,
        collection: CollectionName,
        correlation_id: Optional[UUID] = None,
    ) -> FinancialRecord:
        """
        Append a blank record to a collection.

        Returns the new record so the caller can address it.
        """
        correlation_id = correlation_id or create_correlation_id()

        data, record = add_to_collection(self._data, collection)
        self._commit(data, correlation_id)

        if self._audit_logger:
            self._audit_logger.log_record_added(
                collection=collection.value,
                record_id=record.id,
                correlation_id=correlation_id,
            )
        return record

    def update_record(
        self,
        collection: CollectionName,
        record_id: str,
        patch: RecordPatch,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Apply a patch to one record.

        Returns:
            True if the record existed, False if the id was unknown
            (in which case nothing changes)

        Raises:
            InvalidPatchError: If a bank-only field targets a line item
        """
        correlation_id = correlation_id or create_correlation_id()

        current = self._data.records(collection)
        found = find_record(current, record_id) is not None
        if found:
            try:
                updated = update_record(current, record_id, patch)
            except InvalidPatchError as e:
                if self._audit_logger:
                    self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        details={"collection": collection.value, "record_id": record_id},
                        correlation_id=correlation_id,
                    )
                raise
            self._commit(self._data.with_records(collection, updated), correlation_id)

        if self._audit_logger:
            self._audit_logger.log_record_updated(
                collection=collection.value,
                record_id=record_id,
                field=patch.field.value,
                found=found,
                correlation_id=correlation_id,
            )
        return found

    def remove_record(
        self,
        collection: CollectionName,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Remove one record.

        Returns:
            True if the record existed, False if the id was unknown
        """
        correlation_id = correlation_id or create_correlation_id()

        current = self._data.records(collection)
        found = find_record(current, record_id) is not None
        if found:
            remaining = remove_record(current, record_id)
            self._commit(self._data.with_records(collection, remaining), correlation_id)

        if self._audit_logger:
            self._audit_logger.log_record_removed(
                collection=collection.value,
                record_id=record_id,
                found=found,
                correlation_id=correlation_id,
            )
        return found

    def set_strict_formula(
        self,
        strict: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Switch between the standard and strict BNE formula.

        The formula mode is a view setting, not stored data, so
        listeners are not notified.
        """
        if strict == self._use_strict_formula:
            return
        self._use_strict_formula = strict

        if self._audit_logger:
            self._audit_logger.log_formula_mode_changed(
                strict=strict,
                formula=self.calculations.bne_formula,
                correlation_id=correlation_id,
            )


class StatePersister:
    """
    State listener that saves every new state.

    A failed write is logged and remembered in `last_error`; the
    in-memory state stays authoritative and the edit still succeeds.
    """

    def __init__(
        self,
        repository: BusinessDataRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._audit_logger = audit_logger
        self.last_error: Optional[str] = None

    def __call__(self, data: BusinessData, correlation_id: Optional[UUID] = None) -> None:
        try:
            self._repository.save(data, correlation_id=correlation_id)
        except StorageError as e:
            self.last_error = str(e)
            if self._audit_logger:
                self._audit_logger.log_save_failed(
                    key=self._repository.key,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return
        self.last_error = None


class InsightStatus(str, Enum):
    """What happened to an insight request."""
    GENERATED = "generated"
    FAILED = "failed"
    MISSING_CREDENTIAL = "missing_credential"
    BUSY = "busy"


class InsightController:
    """
    Single-flight coordinator for AI insight requests.

    GUARANTEES:
    - At most one request outstanding (`is_generating`)
    - Without an API key, no agent is built and no request is made;
      the caller gets MISSING_CREDENTIAL and shows MISSING_KEY_NOTICE
    - The result always lands in `insight_text`, replacing the previous
      text only once the new result (or failure message) arrives
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        agent: Optional[InsightAgent] = None,
        agent_factory: Callable[[GeminiSettings], InsightAgent] = InsightAgent,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._agent = agent
        self._agent_factory = agent_factory
        self._audit_logger = audit_logger
        self._insight_text = ""
        self._is_generating = False

    @property
    def insight_text(self) -> str:
        return self._insight_text

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def is_available(self) -> bool:
        """True when a request could be attempted."""
        return self._agent is not None or self._settings.is_configured

    async def request_insight(
        self,
        result: CalculationResult,
        correlation_id: Optional[UUID] = None,
    ) -> InsightStatus:
        """
        Generate an insight for the given figures.

        Never raises for network or model failures: those end up as
        the insight text with status FAILED.
        """
        correlation_id = correlation_id or create_correlation_id()

        if self._is_generating:
            if self._audit_logger:
                self._audit_logger.log_insight_rejected_busy(correlation_id)
            return InsightStatus.BUSY

        if not self.is_available:
            if self._audit_logger:
                self._audit_logger.log_insight_skipped(correlation_id)
            return InsightStatus.MISSING_CREDENTIAL

        self._is_generating = True
        try:
            if self._audit_logger:
                self._audit_logger.log_insight_requested(
                    bne=str(result.bne),
                    correlation_id=correlation_id,
                )
            response = await self._generate(result, correlation_id)
        finally:
            self._is_generating = False

        self._insight_text = response.text

        if self._audit_logger:
            if response.succeeded:
                self._audit_logger.log_insight_generated(
                    length=len(response.text),
                    correlation_id=correlation_id,
                )
            else:
                self._audit_logger.log_insight_failed(
                    error_message=response.error or "unknown error",
                    correlation_id=correlation_id,
                )

        return InsightStatus.GENERATED if response.succeeded else InsightStatus.FAILED

    async def _generate(
        self,
        result: CalculationResult,
        correlation_id: UUID,
    ) -> InsightResponse:
        if self._agent is None:
            try:
                self._agent = self._agent_factory(self._settings)
            except Exception as e:
                if self._audit_logger:
                    self._audit_logger.log_external_service_error(
                        service="gemini",
                        error_message=str(e),
                        correlation_id=correlation_id,
                    )
                return InsightResponse(
                    text=INSIGHT_FAILURE_MESSAGE,
                    succeeded=False,
                    error=str(e),
                )

        bank_details = format_bank_breakdown(result.bank_breakdown)
        return await self._agent.generate_insight(result, bank_details)


def create_app_components(
    use_file_storage: bool = True,
    store: Optional[KeyValueStore] = None,
) -> tuple[DashboardSession, InsightController, StatePersister]:
    """
    Factory function to create all application components.

    Args:
        use_file_storage: Persist to the JSON file from settings.
                    Set to False to keep state in memory only.
        store: Explicit store to use instead (takes precedence)

    Returns:
        (session, insight_controller, persister)
    """
    settings = get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    configure_logging(app_settings.log_level)
    audit_logger = AuditLogger()

    if store is None:
        if use_file_storage:
            store = JsonFileStore(storage_settings.file_path)
        else:
            store = InMemoryStore()

    repository = BusinessDataRepository(
        store,
        key=storage_settings.state_key,
        audit_logger=audit_logger,
    )

    session = DashboardSession(
        repository.load(),
        use_strict_formula=app_settings.default_strict_formula,
        audit_logger=audit_logger,
    )
    persister = StatePersister(repository, audit_logger)
    session.subscribe(persister)

    insight = InsightController(
        settings=settings.gemini,
        audit_logger=audit_logger,
    )

    return session, insight, persister
