"""
变更通知路由
客户端带上已处理的最后一个 event_id 轮询，按事件中的实体 id 精确刷新缓存
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from hms.models.ontology import User
from hms.models.schemas import EventResponse
from hms.services.event_bus import event_bus
from hms.security.auth import require_any_role

router = APIRouter(prefix="/events", tags=["变更通知"])


@router.get("", response_model=List[EventResponse])
def list_events(
    since: int = Query(0, ge=0),
    event_type: Optional[str] = None,
    limit: int = Query(200, ge=1, le=500),
    current_user: User = Depends(require_any_role)
):
    """event_id 大于 since 的事件（按发生顺序）"""
    events = event_bus.get_since(since, limit)
    if event_type:
        events = [e for e in events if e.event_type == event_type]
    return [e.to_dict() for e in events]
