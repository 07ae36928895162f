from __future__ import annotations

import logging
from typing import Any, Optional

from orders.models import Activity

logger = logging.getLogger(__name__)


class ActivityRecorder:
    """Facade around the append-only Activity model."""

    def record(
        self,
        activity_type: str,
        *,
        collective_id: Optional[int] = None,
        user_id: Optional[int] = None,
        order=None,
        data: Optional[dict[str, Any]] = None,
    ) -> Activity:
        entry = Activity(
            type=activity_type,
            collective_id=collective_id,
            user_id=user_id,
            order=order,
            data=data or {},
        )
        entry.save()
        logger.info("Recorded activity %s for collective=%s", activity_type, collective_id)
        return entry
