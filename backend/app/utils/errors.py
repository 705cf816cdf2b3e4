"""서비스 레이어에서 사용하는 공용 예외 정의입니다."""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    # 존재하지 않는 경우와 볼 수 없는 경우를 구분하지 않는다.
    def __init__(self, detail: str = "대상을 찾을 수 없습니다."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "이 작업을 수행할 권한이 없습니다."):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class BadRequestError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidAggregationInput(HTTPException):
    def __init__(self, detail: str = "유효하지 않은 집계 요청입니다."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class SideEffectPartialFailure(Exception):
    """커밋 이후 이력/알림 단계의 실패. 호출자에게는 경고로만 전달된다."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message
