"""Tests for the file gateway."""

from pathlib import Path

import pytest

from filegate.sandbox.gateway import (
    ACCESS_DENIED_MESSAGE,
    CONTENT_REQUIRED_MESSAGE,
    EXTENSION_DENIED_MESSAGE,
    INVALID_OPERATION_MESSAGE,
    FileErrorKind,
    FileGateway,
    FileOperation,
    FileResponse,
    OperationType,
)


def op(op_type, path, content=None) -> FileOperation:
    return FileOperation(type=op_type, path=str(path), content=content)


async def test_write_then_read_round_trip(gateway: FileGateway, workspace: Path):
    text = "line one\nline two: ünïcode\n"
    written = await gateway.handle_operation(op(OperationType.WRITE, "notes.txt", text))
    assert written.success
    assert written.data is None

    read = await gateway.handle_operation(op(OperationType.READ, "notes.txt"))
    assert read.success
    assert read.data == text
    assert (workspace / "notes.txt").read_text(encoding="utf-8") == text


async def test_write_overwrites(gateway: FileGateway, workspace: Path):
    (workspace / "a.txt").write_text("old")
    await gateway.handle_operation(op(OperationType.WRITE, "a.txt", "new"))
    assert (workspace / "a.txt").read_text() == "new"


@pytest.mark.parametrize("op_type", list(OperationType))
async def test_outside_path_denied_for_every_operation(gateway: FileGateway, tmp_path: Path, op_type):
    outside = tmp_path / "outside" / "file.exe"
    result = await gateway.handle_operation(op(op_type, outside, "x"))
    assert not result.success
    assert result.error == ACCESS_DENIED_MESSAGE
    assert result.error_kind is FileErrorKind.ACCESS_DENIED


@pytest.mark.parametrize("op_type", [OperationType.READ, OperationType.WRITE, OperationType.DELETE])
async def test_disallowed_extension_denied_for_file_operations(gateway: FileGateway, workspace: Path, op_type):
    (workspace / "script.py").write_text("print()")
    result = await gateway.handle_operation(op(op_type, "script.py", "x"))
    assert not result.success
    assert result.error == EXTENSION_DENIED_MESSAGE
    assert result.error_kind is FileErrorKind.EXTENSION_DENIED
    assert (workspace / "script.py").exists()


async def test_directory_operations_skip_extension_check(gateway: FileGateway, workspace: Path):
    created = await gateway.handle_operation(op(OperationType.CREATE_DIRECTORY, "data.py"))
    assert created.success
    listed = await gateway.handle_operation(op(OperationType.LIST, "data.py"))
    assert listed.success
    assert listed.data == []


async def test_write_requires_content(gateway: FileGateway, workspace: Path):
    for content in (None, ""):
        result = await gateway.handle_operation(op(OperationType.WRITE, "empty.txt", content))
        assert not result.success
        assert result.error == CONTENT_REQUIRED_MESSAGE
        assert result.error_kind is FileErrorKind.INVALID_INPUT
    assert not (workspace / "empty.txt").exists()


async def test_path_check_runs_before_content_check(gateway: FileGateway, tmp_path: Path):
    result = await gateway.handle_operation(op(OperationType.WRITE, tmp_path / "elsewhere.txt"))
    assert result.error == ACCESS_DENIED_MESSAGE


async def test_list_returns_entry_names(gateway: FileGateway, workspace: Path):
    (workspace / "a.txt").write_text("a")
    (workspace / "b.json").write_text("{}")
    (workspace / "sub").mkdir()

    result = await gateway.handle_operation(op(OperationType.LIST, "."))
    assert result.success
    assert sorted(result.data) == ["a.txt", "b.json", "sub"]


async def test_delete_removes_file(gateway: FileGateway, workspace: Path):
    (workspace / "gone.txt").write_text("bye")
    result = await gateway.handle_operation(op(OperationType.DELETE, "gone.txt"))
    assert result.success
    assert not (workspace / "gone.txt").exists()


async def test_create_directory_is_idempotent_and_recursive(gateway: FileGateway, workspace: Path):
    first = await gateway.handle_operation(op(OperationType.CREATE_DIRECTORY, "a/b/c"))
    second = await gateway.handle_operation(op(OperationType.CREATE_DIRECTORY, "a/b/c"))
    assert first.success
    assert second.success
    assert (workspace / "a" / "b" / "c").is_dir()


async def test_read_missing_file_is_not_found(gateway: FileGateway):
    result = await gateway.handle_operation(op(OperationType.READ, "missing.txt"))
    assert not result.success
    assert result.error_kind is FileErrorKind.NOT_FOUND
    assert result.error


async def test_list_missing_directory_fails(gateway: FileGateway):
    result = await gateway.handle_operation(op(OperationType.LIST, "nope"))
    assert not result.success
    assert result.error_kind is FileErrorKind.NOT_FOUND


async def test_read_directory_is_internal_error(gateway: FileGateway, workspace: Path):
    (workspace / "dir.txt").mkdir()
    result = await gateway.handle_operation(op(OperationType.READ, "dir.txt"))
    assert not result.success
    assert result.error_kind is FileErrorKind.INTERNAL


async def test_unknown_operation_type(gateway: FileGateway):
    result = await gateway.handle_operation(op("rename", "a.txt"))
    assert not result.success
    assert result.error == INVALID_OPERATION_MESSAGE


def test_from_raw_keeps_unknown_type():
    operation = FileOperation.from_raw({"type": "rename", "path": "a.txt"})
    assert operation.type == "rename"

    operation = FileOperation.from_raw({"type": "write", "path": "a.txt", "content": "x"})
    assert operation.type is OperationType.WRITE
    assert operation.content == "x"


def test_file_response_to_dict():
    assert FileResponse.ok(["a"]).to_dict() == {"success": True, "data": ["a"]}
    assert FileResponse.ok().to_dict() == {"success": True}
    assert FileResponse.fail("boom").to_dict() == {"success": False, "error": "boom"}
