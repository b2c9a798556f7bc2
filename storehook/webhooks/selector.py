"""Hook selection for a triggering event."""

import structlog

from storehook.errors import HookSelectionError
from storehook.webhooks.models import Hook, HookType
from storehook.webhooks.repository import HookRepository

logger = structlog.get_logger(__name__)


class HookSelector:
    """Resolves the ordered set of hooks that apply to an event."""

    def __init__(self, repository: HookRepository) -> None:
        self._repository = repository
        self._logger = logger.bind(component="hook_selector")

    async def select(
        self,
        hook_type: HookType,
        store_id: int | None,
        order_status: str | None = None,
    ) -> list[Hook]:
        """Select enabled hooks for an event, lowest priority first.

        Args:
            hook_type: Event hook type.
            store_id: Store of the triggering item; None skips store scoping.
            order_status: Current order status; only used for order hooks.

        Returns:
            Matching hooks sorted by priority. Ties keep repository order.

        Raises:
            HookSelectionError: If the repository cannot be queried.
        """
        try:
            hooks = await self._repository.list_by_type(hook_type)
        except Exception as e:
            self._logger.error(
                "hook_selection_failed",
                hook_type=hook_type.value,
                error=str(e),
            )
            raise HookSelectionError(
                f"Failed to load {hook_type.value} hooks: {e}",
                hook_type=hook_type.value,
            ) from e

        selected = [h for h in hooks if h.hook_type == hook_type and h.status]

        if store_id is not None:
            selected = [h for h in selected if h.applies_to_store(store_id)]

        if hook_type is HookType.ORDER and order_status is not None:
            selected = [h for h in selected if h.accepts_order_status(order_status)]

        selected.sort(key=lambda h: h.priority)

        self._logger.debug(
            "hooks_selected",
            hook_type=hook_type.value,
            store_id=store_id,
            count=len(selected),
        )
        return selected
