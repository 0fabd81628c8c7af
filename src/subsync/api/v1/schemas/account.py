from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SubscriptionStatusOut(BaseModel):
    # 프론트가 쓰던 camelCase 키 그대로 응답
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subscription_status: str
    subscription_id: Optional[str] = None
    current_period_end: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None
