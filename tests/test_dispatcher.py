"""Tests for the dispatcher and its configuration lifecycle."""

import asyncio
import signal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from filegate import __version__
from filegate.config.schema import FileConfig
from filegate.dispatcher import Dispatcher, DispatcherState, RequestKind, install_shutdown_hook
from filegate.errors import CapabilityError, ErrorCode


def _config_params(workspace: Path) -> dict:
    return {"config": {"allowedDirectories": [str(workspace)], "allowedExtensions": ["txt", "json"]}}


# -- lifecycle -------------------------------------------------------------------


async def test_unconfigured_answers_info_only(workspace: Path):
    d = Dispatcher(base_dir=workspace)

    info = await d.dispatch(RequestKind.SERVER_INFO)
    assert info == {"name": "mcp-file-server", "version": __version__, "configured": False}

    for kind in (RequestKind.LIST_TOOLS, RequestKind.LIST_RESOURCES, RequestKind.LIST_PROMPTS):
        with pytest.raises(CapabilityError) as exc_info:
            await d.dispatch(kind)
        assert exc_info.value.code is ErrorCode.NOT_CONFIGURED


async def test_set_configuration_request(workspace: Path):
    d = Dispatcher(base_dir=workspace)

    result = await d.dispatch("server/config", _config_params(workspace))

    assert result == {"success": True}
    assert d.state is DispatcherState.CONFIGURED
    assert d.config.allowed_extensions == ["txt", "json"]
    for sub in ("resources", "tools", "prompts"):
        assert (workspace / sub).is_dir()
    assert (await d.dispatch("server/info"))["configured"] is True


async def test_set_configuration_invalid_params(workspace: Path):
    d = Dispatcher(base_dir=workspace)
    with pytest.raises(CapabilityError) as exc_info:
        await d.dispatch(RequestKind.SET_CONFIGURATION, {})
    assert exc_info.value.code is ErrorCode.INVALID_PARAMS

    with pytest.raises(CapabilityError) as exc_info:
        await d.dispatch(RequestKind.SET_CONFIGURATION, {"config": {"allowedDirectories": "nope"}})
    assert exc_info.value.code is ErrorCode.INVALID_PARAMS
    assert d.state is DispatcherState.UNCONFIGURED


async def test_configure_failure_names_manager(workspace: Path, tmp_path: Path):
    d = Dispatcher(base_dir=workspace)
    denied = FileConfig(allowed_directories=[str(tmp_path / "elsewhere")], allowed_extensions=["txt"])

    with pytest.raises(CapabilityError) as exc_info:
        await d.configure(denied)

    assert exc_info.value.code is ErrorCode.INTERNAL_ERROR
    assert "manager" in exc_info.value.message
    assert "directory" in exc_info.value.message
    assert d.state is DispatcherState.UNCONFIGURED


async def test_configure_failure_of_one_manager(workspace: Path, file_config: FileConfig):
    d = Dispatcher(base_dir=workspace)
    with patch(
        "filegate.dispatcher.PromptManager.initialize",
        AsyncMock(side_effect=OSError("disk on fire")),
    ):
        with pytest.raises(CapabilityError, match="Failed to initialize prompts manager: disk on fire"):
            await d.configure(file_config)
    assert not d.is_configured


async def test_reconfigure_replaces_managers(dispatcher: Dispatcher, workspace: Path):
    old_tools = dispatcher.tools
    await dispatcher.dispatch(RequestKind.SET_CONFIGURATION, _config_params(workspace))
    assert dispatcher.tools is not old_tools


async def test_close_is_idempotent(dispatcher: Dispatcher):
    await dispatcher.close()
    await dispatcher.close()
    assert dispatcher.state is DispatcherState.CLOSED

    with pytest.raises(CapabilityError) as exc_info:
        await dispatcher.dispatch(RequestKind.LIST_TOOLS)
    assert exc_info.value.code is ErrorCode.NOT_CONFIGURED

    with pytest.raises(CapabilityError):
        await dispatcher.dispatch(RequestKind.SET_CONFIGURATION, {"config": {}})


async def test_unknown_request_kind(dispatcher: Dispatcher):
    with pytest.raises(CapabilityError) as exc_info:
        await dispatcher.dispatch("files/rename")
    assert exc_info.value.code is ErrorCode.METHOD_NOT_FOUND


# -- routing ---------------------------------------------------------------------


async def test_list_tools(dispatcher: Dispatcher):
    result = await dispatcher.dispatch(RequestKind.LIST_TOOLS)
    assert [t["name"] for t in result["tools"]] == ["readFile", "writeFile", "listDirectory", "deleteFile"]
    assert result["tools"][0]["inputSchema"]["type"] == "object"


async def test_call_tool_round_trip(dispatcher: Dispatcher, workspace: Path):
    written = await dispatcher.dispatch(
        RequestKind.CALL_TOOL,
        {"name": "writeFile", "arguments": {"path": "resources/a.txt", "content": "alpha"}},
    )
    assert "isError" not in written

    read = await dispatcher.dispatch(RequestKind.CALL_TOOL, {"name": "readFile", "arguments": {"path": "resources/a.txt"}})
    assert read["content"] == [{"type": "text", "text": "alpha"}]


async def test_call_unknown_tool_is_data(dispatcher: Dispatcher):
    result = await dispatcher.dispatch(RequestKind.CALL_TOOL, {"name": "nope", "arguments": {}})
    assert result["isError"] is True
    assert "nope" in result["content"][0]["text"]


async def test_call_tool_requires_name(dispatcher: Dispatcher):
    with pytest.raises(CapabilityError) as exc_info:
        await dispatcher.dispatch(RequestKind.CALL_TOOL, {"arguments": {}})
    assert exc_info.value.code is ErrorCode.INVALID_PARAMS


async def test_list_and_read_resources(dispatcher: Dispatcher, workspace: Path):
    (workspace / "resources" / "a.txt").write_text("alpha")

    listed = await dispatcher.dispatch(RequestKind.LIST_RESOURCES)
    assert listed == {"resources": [{"name": "a.txt", "uri": "file://resources/a.txt"}]}

    read = await dispatcher.dispatch(RequestKind.READ_RESOURCE, {"uri": "file://resources/a.txt"})
    assert read["contents"][0]["text"] == "alpha"

    templates = await dispatcher.dispatch(RequestKind.LIST_RESOURCE_TEMPLATES)
    assert len(templates["resourceTemplates"]) == 2


async def test_prompts(dispatcher: Dispatcher, write_prompt, weather_prompt):
    write_prompt("weather.json", weather_prompt)

    listed = await dispatcher.dispatch(RequestKind.LIST_PROMPTS, {"cursor": "x"})
    assert [p["name"] for p in listed["prompts"]] == ["weather"]

    result = await dispatcher.dispatch(RequestKind.GET_PROMPT, {"name": "weather", "arguments": {"city": "Oslo"}})
    assert result["messages"][0]["content"][0]["text"] == "Hello Oslo, it is "

    with pytest.raises(CapabilityError) as exc_info:
        await dispatcher.dispatch(RequestKind.GET_PROMPT, {"name": "weather"})
    assert exc_info.value.code is ErrorCode.INVALID_PARAMS

    with pytest.raises(CapabilityError) as exc_info:
        await dispatcher.dispatch(RequestKind.GET_PROMPT, {})
    assert exc_info.value.code is ErrorCode.INVALID_PARAMS


async def test_unexpected_error_becomes_internal(dispatcher: Dispatcher):
    with patch.object(dispatcher.prompts, "list_prompts", AsyncMock(side_effect=RuntimeError("boom"))):
        with pytest.raises(CapabilityError) as exc_info:
            await dispatcher.dispatch(RequestKind.LIST_PROMPTS)
    assert exc_info.value.code is ErrorCode.INTERNAL_ERROR
    assert "boom" in exc_info.value.message


# -- shutdown hook ---------------------------------------------------------------


async def test_shutdown_hook_installed_once(workspace: Path):
    d = Dispatcher(base_dir=workspace)
    loop = MagicMock()

    assert install_shutdown_hook(d, loop=loop) is True
    assert install_shutdown_hook(d, loop=loop) is False
    registered = [c.args[0] for c in loop.add_signal_handler.call_args_list]
    assert registered == [signal.SIGINT, signal.SIGTERM]


async def test_shutdown_hook_closes_dispatcher(dispatcher: Dispatcher):
    loop = asyncio.get_running_loop()
    stopped = asyncio.Event()
    handlers = {}

    def capture(sig, callback, *args):
        handlers[sig] = lambda: callback(*args)

    with patch.object(loop, "add_signal_handler", side_effect=capture):
        install_shutdown_hook(dispatcher, on_shutdown=stopped.set, loop=loop)

    handlers[signal.SIGINT]()
    await asyncio.wait_for(stopped.wait(), timeout=1)

    assert dispatcher.state is DispatcherState.CLOSED


async def test_shutdown_task_is_held_until_done(dispatcher: Dispatcher):
    loop = asyncio.get_running_loop()
    stopped = asyncio.Event()
    handlers = {}

    def capture(sig, callback, *args):
        handlers[sig] = lambda: callback(*args)

    with patch.object(loop, "add_signal_handler", side_effect=capture):
        install_shutdown_hook(dispatcher, on_shutdown=stopped.set, loop=loop)

    handlers[signal.SIGTERM]()
    assert len(dispatcher._shutdown_tasks) == 1
    task = next(iter(dispatcher._shutdown_tasks))

    await asyncio.wait_for(task, timeout=1)
    assert stopped.is_set()
    assert dispatcher._shutdown_tasks == set()
