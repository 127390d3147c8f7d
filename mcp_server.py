"""
MCP Server for the NetSuite REST client

This file exposes the client operations as MCP tools,
so that an AI client can query NetSuite and move File Cabinet files.

stdio carries the MCP protocol, so the interactive sign-in prompt is not
available here: set NETSUITE_ACCESS_TOKEN or NETSUITE_REFRESH_TOKEN.
"""

from pathlib import Path

from mcp.server.fastmcp import FastMCP

from file_transfer import file_exists
from netsuite_errors import ConfigurationError
from netsuite_client import NetSuiteClient

mcp = FastMCP("netsuite-rest-client")

_client: NetSuiteClient | None = None


def _prompt_unavailable(_message: str) -> str:
    raise ConfigurationError("Interactive sign-in is not possible over MCP stdio; configure a token")


def get_client() -> NetSuiteClient:
    global _client
    if _client is None:
        client = NetSuiteClient(prompt=_prompt_unavailable)
        client.sign_in()
        _client = client
    return _client


@mcp.tool()
def suiteql_query(query: str, limit: int = 100, offset: int = 0) -> dict:
    """
    MCP Tool: suiteql_query
    Run a SuiteQL query (limit 1..1000) and return NetSuite's JSON answer.
    """
    return get_client().execute_suiteql(query, limit=limit, offset=offset) or {}


@mcp.tool()
def get_record(path: str) -> dict:
    """
    MCP Tool: get_record
    GET any REST path, e.g. /record/v1/customer/42
    """
    return get_client().request_get(path) or {}


@mcp.tool()
def metadata_catalog() -> dict:
    """Return the record types available to the integration."""
    return get_client().get_metadata_catalog() or {}


@mcp.tool()
def download_file(file_id: str, folder: str = ".") -> dict:
    """Download a File Cabinet file through the RESTlet into a local folder."""
    path = get_client().download_file(file_id, folder)
    return {"path": str(path)}


@mcp.tool()
def upload_file(directory: str, folder_name: str, file: str) -> dict:
    """Upload a local file to a File Cabinet folder through the RESTlet."""
    client = get_client()
    # upload_file returns None both for a skipped file and an empty answer
    if not file_exists(Path(directory).expanduser() / file):
        return {"uploaded": False, "reason": "local file not found", "response": None}
    result = client.upload_file(directory, folder_name, file)
    return {"uploaded": True, "response": result}


# Entry point when running this file directly
if __name__ == "__main__":
    mcp.run(transport="stdio")
