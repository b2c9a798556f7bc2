"""Webhook dispatch orchestration.

For one triggering event the orchestrator selects the matching hooks and,
for each hook in priority order, renders the URL and body, sends the
request, records a history entry and alerts on failure. A failing hook
never stops the hooks after it; only a hook selection failure escapes.
"""

from collections.abc import Callable

import structlog

from storehook.config import DispatchConfig, settings
from storehook.errors import HookNotFoundError
from storehook.webhooks.dispatcher import HttpDispatcher
from storehook.webhooks.enrichment import ContextEnricher
from storehook.webhooks.items import AnyItem
from storehook.webhooks.models import (
    DispatchOutcome,
    HistoryRecord,
    HistoryStatus,
    Hook,
    HookType,
)
from storehook.webhooks.notifier import LoggingNotifier, Notifier
from storehook.webhooks.repository import (
    HistoryStore,
    HookRepository,
    InMemoryHistoryStore,
    InMemoryHookRepository,
)
from storehook.webhooks.selector import HookSelector
from storehook.webhooks.templates import TemplateRenderer

logger = structlog.get_logger(__name__)

ConfigProvider = Callable[[], DispatchConfig]


def alert_message(hook: Hook) -> str:
    return f"Something went wrong while sending {hook.name} hook"


class WebhookOrchestrator:
    """Drives select, render, send, record and alert for domain events.

    Example:
        orchestrator = WebhookOrchestrator(repository, history)
        records = await orchestrator.dispatch(order, HookType.ORDER)
    """

    def __init__(
        self,
        repository: HookRepository,
        history: HistoryStore,
        *,
        dispatcher: HttpDispatcher | None = None,
        enricher: ContextEnricher | None = None,
        renderer: TemplateRenderer | None = None,
        notifier: Notifier | None = None,
        config_provider: ConfigProvider | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            repository: Hook definitions.
            history: History store receiving one record per hook invocation.
            dispatcher: HTTP dispatcher (httpx transport if not provided).
            enricher: Context enricher (empty catalog if not provided).
            renderer: Template renderer (default filters if not provided).
            notifier: Failure alert notifier (logs only if not provided).
            config_provider: Returns the config for a dispatch call
                (global settings if not provided).
        """
        self._repository = repository
        self._history = history
        self._selector = HookSelector(repository)
        self._dispatcher = dispatcher or HttpDispatcher()
        self._enricher = enricher or ContextEnricher()
        self._renderer = renderer or TemplateRenderer()
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._config_provider = config_provider or settings.dispatch_config
        self._logger = logger.bind(component="webhook_orchestrator")

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def repository(self) -> HookRepository:
        return self._repository

    async def render_item_template(self, item: AnyItem, template: str | None) -> str:
        """Enrich an item and render one template against it.

        Failures are logged at critical level and yield an empty string.

        Args:
            item: Triggering item.
            template: Template source.

        Returns:
            Rendered string, or "" if rendering failed.
        """
        try:
            context = await self._enricher.enrich(item)
            return self._renderer.render(template, {"item": context})
        except Exception as e:
            self._logger.critical(
                "template_render_failed",
                item_kind=item.kind,
                error=str(e),
            )
            return ""

    async def dispatch(
        self,
        item: AnyItem,
        hook_type: HookType,
        *,
        config: DispatchConfig | None = None,
    ) -> list[HistoryRecord]:
        """Run every hook matching an item's event and store.

        Args:
            item: Triggering item.
            hook_type: Event hook type.
            config: Dispatch config (from the provider if not given).

        Returns:
            History records written, in processing order.

        Raises:
            HookSelectionError: If hooks cannot be loaded.
        """
        config = config or self._config_provider()
        if not config.enabled:
            self._logger.debug("webhooks_disabled", hook_type=hook_type.value)
            return []

        store_id = item.store_id or config.default_store_id
        order_status = None
        if hook_type is HookType.ORDER:
            order_status = getattr(item, "status", None) or ""

        hooks = await self._selector.select(hook_type, store_id, order_status)

        records: list[HistoryRecord] = []
        for hook in hooks:
            try:
                records.append(await self._process_hook(hook, item, config, store_id))
            except Exception as e:
                self._logger.error(
                    "history_write_failed",
                    hook_id=hook.id,
                    error=str(e),
                )

        self._logger.info(
            "event_dispatched",
            hook_type=hook_type.value,
            store_id=store_id,
            hook_count=len(hooks),
            failed=sum(1 for r in records if r.status is HistoryStatus.ERROR),
        )
        return records

    async def broadcast(
        self,
        item: AnyItem,
        hook_type: HookType,
        *,
        config: DispatchConfig | None = None,
    ) -> list[HistoryRecord]:
        """Run every enabled hook of a type, regardless of store scope.

        Used for events that are not tied to a store-scoped item. Any error
        while processing a hook, including one before its history record
        exists, triggers the failure alert.

        Args:
            item: Triggering item.
            hook_type: Event hook type.
            config: Dispatch config (from the provider if not given).

        Returns:
            History records written, in processing order.

        Raises:
            HookSelectionError: If hooks cannot be loaded.
        """
        config = config or self._config_provider()
        if not config.enabled:
            self._logger.debug("webhooks_disabled", hook_type=hook_type.value)
            return []

        store_id = config.default_store_id
        hooks = await self._selector.select(hook_type, None)

        records: list[HistoryRecord] = []
        for hook in hooks:
            try:
                records.append(await self._process_hook(hook, item, config, store_id))
            except Exception as e:
                self._logger.error(
                    "hook_processing_failed",
                    hook_id=hook.id,
                    error=str(e),
                )
                await self._alert(hook, config, store_id)

        self._logger.info(
            "event_broadcast",
            hook_type=hook_type.value,
            hook_count=len(hooks),
        )
        return records

    async def replay(
        self,
        history_id: str,
        *,
        config: DispatchConfig | None = None,
    ) -> HistoryRecord:
        """Resend a recorded request.

        The recorded URL and body are sent again with the hook's current
        method, headers and credentials. The result is a new history record
        pointing back at the original.

        Args:
            history_id: Record to replay.
            config: Dispatch config (from the provider if not given).

        Returns:
            The new history record.

        Raises:
            HookNotFoundError: If the record or its hook no longer exists.
        """
        config = config or self._config_provider()

        source = await self._history.get(history_id)
        if source is None:
            raise HookNotFoundError(
                f"History record {history_id} not found", resource_id=history_id
            )

        hook = await self._repository.get(source.hook_id)
        if hook is None:
            raise HookNotFoundError(
                f"Hook {source.hook_id} not found", resource_id=source.hook_id
            )

        outcome = await self._send(hook, source.payload_url, source.body)
        record = HistoryRecord.from_outcome(
            hook,
            payload_url=source.payload_url,
            body=source.body,
            outcome=outcome,
            replay_of=source.id,
        )

        if not outcome.success:
            await self._alert(hook, config, config.default_store_id)

        await self._history.add(record)

        self._logger.info(
            "history_replayed",
            history_id=history_id,
            new_history_id=record.id,
            success=outcome.success,
        )
        return record

    async def _process_hook(
        self,
        hook: Hook,
        item: AnyItem,
        config: DispatchConfig,
        store_id: int,
    ) -> HistoryRecord:
        payload_url = await self.render_item_template(item, hook.payload_url)
        body = await self.render_item_template(item, hook.body)

        outcome = await self._send(hook, payload_url, body)
        record = HistoryRecord.from_outcome(
            hook,
            payload_url=payload_url,
            body=body,
            outcome=outcome,
        )

        if outcome.success:
            self._logger.info("hook_dispatched", hook_id=hook.id, hook_name=hook.name)
        else:
            self._logger.warning(
                "hook_delivery_failed",
                hook_id=hook.id,
                hook_name=hook.name,
                message=outcome.message,
            )
            await self._alert(hook, config, store_id)

        await self._history.add(record)
        return record

    async def _send(self, hook: Hook, url: str, body: str) -> DispatchOutcome:
        try:
            return await self._dispatcher.send_for_hook(hook, url, body)
        except Exception as e:
            return DispatchOutcome(success=False, message=str(e))

    async def _alert(self, hook: Hook, config: DispatchConfig, store_id: int) -> None:
        if not config.alert_enabled:
            return

        try:
            await self._notifier.send(
                list(config.send_to),
                alert_message(hook),
                config.email_template,
                store_id,
            )
        except Exception as e:
            self._logger.error(
                "alert_failed",
                hook_id=hook.id,
                error=str(e),
            )


# Global orchestrator instance
_orchestrator: WebhookOrchestrator | None = None


def get_webhook_orchestrator() -> WebhookOrchestrator:
    """Get the global webhook orchestrator.

    The API lifespan installs one backed by SQLite stores; outside an app
    the first call falls back to in-memory stores.

    Returns:
        Singleton WebhookOrchestrator.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = WebhookOrchestrator(InMemoryHookRepository(), InMemoryHistoryStore())
    return _orchestrator


def set_webhook_orchestrator(orchestrator: WebhookOrchestrator | None) -> None:
    """Set the global webhook orchestrator.

    Useful for testing.

    Args:
        orchestrator: WebhookOrchestrator instance, or None to reset.
    """
    global _orchestrator
    _orchestrator = orchestrator


def webhook_orchestrator_is_set() -> bool:
    """Check whether a global orchestrator has been installed."""
    return _orchestrator is not None
