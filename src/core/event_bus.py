"""EventBus - 서비스 내부 동기 이벤트 전달

규칙:
- 이벤트 data는 식별자와 payload dict만 (ORM/세션 객체 금지)
- 핸들러 예외는 로그만 남기고 발행자에게 전파하지 않는다 (fire-and-forget)
- 핸들러 안에서 재발행은 MAX_DEPTH 단계까지
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 핸들러 내 재발행 최대 깊이


@dataclass
class DiceEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: EventTypes 상수 (예: "dice_selection_settled")
        data: 이벤트 데이터 (user_id, config payload 등)
        source: 발행한 서비스 이름
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    depth: int = field(default=0, repr=False)


EventHandler = Callable[[DiceEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe(EventTypes.DICE_SELECTION_SETTLED, service.on_settled)
        bus.emit(DiceEvent(EventTypes.DICE_SELECTION_SETTLED, {"user_id": "u1"}, "dice_service"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._depth = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("EventBus subscribe: %s → %s", event_type, handler.__qualname__)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
        else:
            logger.warning(
                "EventBus handler not registered: %s → %s",
                event_type,
                handler.__qualname__,
            )

    def emit(self, event: DiceEvent) -> int:
        """등록된 핸들러를 순서대로 동기 호출.

        반환: 에러 없이 끝난 핸들러 수.
        깊이 초과 시 발행 자체를 무시하고 0 반환.
        """
        if self._depth >= MAX_DEPTH:
            logger.warning(
                "EventBus depth exceeded (%d): %s:%s dropped",
                MAX_DEPTH,
                event.source,
                event.event_type,
            )
            return 0

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug("EventBus: no subscribers for %s", event.event_type)
            return 0

        event.depth = self._depth
        logger.info(
            "EventBus emit: %s (source=%s, depth=%d, handlers=%d)",
            event.event_type,
            event.source,
            self._depth,
            len(handlers),
        )

        succeeded = 0
        self._depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                    succeeded += 1
                except Exception:
                    logger.exception(
                        "EventBus handler error: %s (event=%s)",
                        handler.__qualname__,
                        event.event_type,
                    )
        finally:
            self._depth -= 1
        return succeeded

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self._depth = 0

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
