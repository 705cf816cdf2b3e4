"""여러 모델이 공유하는 응답 보조 속성입니다."""


class SideEffectWarningsMixin:
    """후처리(이력/알림) 단계에서 발생한 경고를 응답에 실어 보낸다."""

    @property
    def warnings(self):
        return list(getattr(self, "_side_effect_warnings", []))
