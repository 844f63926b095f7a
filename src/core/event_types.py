"""이벤트 유형 상수"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # 선택이 확정됨 (select/set_base/restore 이후). 저장 핸들러가 구독.
    DICE_SELECTION_SETTLED = "dice_selection_settled"
    DICE_SELECTION_REJECTED = "dice_selection_rejected"

    # 저장 완료
    DICE_CONFIG_SAVED = "dice_config_saved"

    # 갤러리 공유
    DICE_SHARED = "dice_shared"
