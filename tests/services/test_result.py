"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from dbmeta.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="export_scripts", data={"table_count": 3})
        assert result.ok is True
        assert result.op == "export_scripts"
        assert result.data == {"table_count": 3}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="NO_SCRIPT", message="No .sql file found")
        result = ServiceResult(ok=False, op="update_db", error=error)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "NO_SCRIPT"

    def test_failure_shorthand(self) -> None:
        result = ServiceResult.failure(
            "update_db",
            "EXECUTION_FAILED",
            "Statement 2 failed",
            detail={"index": 1},
            warnings=["Rollback failed: gone"],
        )
        assert result.ok is False
        assert result.op == "update_db"
        assert result.error is not None
        assert result.error.code == "EXECUTION_FAILED"
        assert result.error.detail == {"index": 1}
        assert result.warnings == ["Rollback failed: gone"]
        assert result.data == {}

    def test_failure_defaults(self) -> None:
        result = ServiceResult.failure("build_db", "CREATE_FAILED", "no")
        assert result.error is not None
        assert result.error.detail == {}
        assert result.warnings == []

    def test_json_serialization(self) -> None:
        result = ServiceResult(
            ok=True,
            op="update_db",
            data={"executed": 4},
            meta={"duration_ms": 42},
        )
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["op"] == "update_db"
        assert parsed["data"]["executed"] == 4
        assert parsed["meta"]["duration_ms"] == 42

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_with_detail(self) -> None:
        error = ServiceError(
            code="READ_FAILED",
            message="Could not read file",
            detail={"script": "/tmp/schema.sql"},
        )
        assert error.detail["script"] == "/tmp/schema.sql"

    def test_default_detail(self) -> None:
        error = ServiceError(code="E001", message="bad")
        assert error.detail == {}
