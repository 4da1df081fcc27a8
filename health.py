#!/usr/bin/env python3
"""
Health information for the Consultant Jobs MCP server
"""

import json
import sys

from jsonrpc_dispatcher import SERVER_NAME, SERVER_VERSION
from tool_registry import tool_names


def health_check():
    """Status document served from GET /health"""
    return {
        "status": "healthy",
        "server": SERVER_NAME,
        "version": SERVER_VERSION,
        "tools": tool_names(),
    }


if __name__ == "__main__":
    result = health_check()
    print(json.dumps(result, indent=2))
    sys.exit(0 if result["status"] == "healthy" else 1)
