from datetime import datetime
from zoneinfo import ZoneInfo
from pydantic import BaseModel, ConfigDict, field_serializer

from .config import settings

class CustomModel(BaseModel):
    """
    프로젝트의 모든 Pydantic 스키마가 상속받는 공통 기본 모델.
    API 데이터 정책을 중앙에서 관리합니다.
    """
    model_config = ConfigDict(
        # True일 경우, 필드 별칭(alias)으로도 값을 할당할 수 있습니다.
        populate_by_name=True,
        
        # SQLAlchemy 모델 객체를 Pydantic 스키마로 변환 가능하게 합니다.
        from_attributes=True,

        # 선언되지 않은 필드는 거부합니다. (다른 operation 그룹의 필드 주입 방지)
        extra="forbid",
    )
    
    @field_serializer('*', check_fields=False)
    def serialize_datetime(self, value, _info):
        """datetime 객체를 설정된 시간대 기준으로 특정 포맷의 문자열로 변환합니다."""
        if isinstance(value, datetime):
            return format_datetime(value)
        return value


def format_datetime(value: datetime) -> str:
    tz = ZoneInfo(settings.TIMEZONE)
    # naive datetime은 설정된 시간대로 간주합니다.
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    else:
        value = value.astimezone(tz)
    return value.strftime("%Y-%m-%d %H:%M:%S")  # 프론트엔드와 협의된 명확한 포맷 사용
