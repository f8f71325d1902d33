"""MCP server exposing the install/update lifecycle events as tools."""
import asyncio
import json
from typing import Any, Dict, List

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions
from mcp.server import stdio

from security_checker_installer import __version__
from security_checker_installer.config import resolve_provider
from security_checker_installer.errors import InstallerError, log_error
from security_checker_installer.hooks import binary_directory
from security_checker_installer.logging import configure_logging, get_logger
from security_checker_installer.provisioner import ensure_installed

logger = get_logger("server")

SERVER_NAME = "security-checker-installer"

BIN_DIR_SCHEMA = {
    "type": "object",
    "properties": {
        "bin_dir": {
            "type": "string",
            "description": "Target directory for the checker binary",
        },
        "project_root": {
            "type": "string",
            "description": "Project whose pyproject.toml configures bin-dir",
        },
    },
}

# Tool name -> force flag
TOOL_FORCE = {
    "checker_install": False,
    "checker_update": True,
}

tools = [
    types.Tool(
        name="checker_install",
        description="Install the local PHP security checker unless it is already present",
        inputSchema=BIN_DIR_SCHEMA,
    ),
    types.Tool(
        name="checker_update",
        description="Verify the local PHP security checker against the latest release",
        inputSchema=BIN_DIR_SCHEMA,
    ),
]


def _text(payload: Dict[str, Any]) -> List[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(payload))]


async def handle_tool_call(
    name: str, arguments: Dict[str, Any]
) -> List[types.TextContent]:
    """Run a tool and wrap its result as JSON text content."""
    if name not in TOOL_FORCE:
        return _text({"success": False, "error": f"Unknown tool: {name}"})

    arguments = arguments or {}
    try:
        config = resolve_provider(
            arguments.get("project_root"), arguments.get("bin_dir")
        )
        bin_dir = binary_directory(config)
        result = await ensure_installed(bin_dir, TOOL_FORCE[name])
    except InstallerError as e:
        log_error(e, {"tool": name, "arguments": arguments}, logger)
        return _text(
            {
                "success": False,
                "error": str(e),
                "code": e.code,
                "details": e.details,
            }
        )

    return _text({"success": True, "data": result.to_dict()})


async def init_server() -> Server:
    logger.info(f"Registered tools: {', '.join(t.name for t in tools)}")

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        logger.debug("Tools requested")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        logger.debug(f"Tool call received: {name} with arguments {arguments}")
        return await handle_tool_call(name, arguments)

    return server


async def serve() -> None:
    configure_logging()
    logger.info("Starting security checker installer server")
    server = await init_server()
    async with stdio.stdio_server() as (read_stream, write_stream):
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=__version__,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
                logging=types.LoggingCapability(),
            ),
        )
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    """Run the MCP server."""
    asyncio.run(serve())
