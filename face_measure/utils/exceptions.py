"""커스텀 예외 클래스 정의"""


class FaceMeasureException(Exception):
    """기본 예외 클래스"""
    pass


class DetectorExecutionError(FaceMeasureException):
    """검출기 실행 실패 예외 (파이프라인 내부에서 fallback 처리)"""
    pass


class MalformedInputError(FaceMeasureException):
    """잘못된 이미지 입력 예외 (호출자에게 전달되는 유일한 예외)"""
    pass


class ConfigurationError(FaceMeasureException):
    """설정 오류 예외"""
    pass
