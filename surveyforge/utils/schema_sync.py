"""런타임 스키마 동기화 유틸리티."""

from __future__ import annotations

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateColumn, CreateIndex, MetaData


def _existing_names(rows: list[dict]) -> set[str]:
    return {str(row.get("name")) for row in rows if row.get("name")}


def sync_missing_schema_objects(engine: Engine, metadata: MetaData) -> list[str]:
    """이미 존재하는 테이블에 모델 기준으로 빠진 컬럼/인덱스를 추가하고, 실행한 DDL을 반환한다."""
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    preparer = engine.dialect.identifier_preparer
    applied: list[str] = []

    with engine.begin() as conn:
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue

            known_columns = _existing_names(inspector.get_columns(table.name))
            table_sql = preparer.format_table(table)
            for column in table.columns:
                if column.name in known_columns:
                    continue
                # 신규 컬럼은 NOT NULL 제약 없이 추가한다 (기존 행 보호).
                column_sql = str(CreateColumn(column).compile(dialect=engine.dialect)).strip()
                column_sql = column_sql.replace(" NOT NULL", "")
                statement = f"ALTER TABLE {table_sql} ADD COLUMN {column_sql}"
                conn.execute(text(statement))
                applied.append(statement)

            known_indexes = _existing_names(inspector.get_indexes(table.name))
            for index in table.indexes:
                if not index.name or index.name in known_indexes:
                    continue
                conn.execute(CreateIndex(index))
                applied.append(f"CREATE INDEX {index.name}")
    return applied
