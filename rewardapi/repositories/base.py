from abc import ABC
from typing import TypeVar, Generic, Optional, Dict, Any, Type, Sequence
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
from pydantic import BaseModel

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """모든 리포지토리의 베이스 클래스 - Pydantic 응답 보장"""

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def get_model(self, id: Any) -> Optional[T]:
        """ID로 ORM 인스턴스 조회 (트랜잭션 내부 처리용)"""
        return self.db.get(self.model_class, id)

    def lock_by_field(self, field_name: str, value: Any) -> Optional[T]:
        """SELECT ... FOR UPDATE 로 행 잠금 후 최신 값으로 다시 읽음

        sqlite는 FOR UPDATE를 무시하지만 쓰기 트랜잭션 자체가 직렬화됨
        """
        stmt = (
            select(self.model_class)
            .where(getattr(self.model_class, field_name) == value)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalars().first()

    def insert_ignore(self, values: Dict[str, Any], conflict_columns: Sequence[str]) -> None:
        """INSERT ... ON CONFLICT DO NOTHING (동시 생성 경합 시 한쪽만 성공)"""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(self.model_class)
        elif dialect == "sqlite":
            stmt = sqlite_insert(self.model_class)
        else:
            raise NotImplementedError(f"Unsupported dialect for upsert: {dialect}")

        self.db.execute(
            stmt.values(**values).on_conflict_do_nothing(index_elements=list(conflict_columns))
        )

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """레코드 수 조회"""
        query = self.db.query(self.model_class)

        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)

        return query.count()
