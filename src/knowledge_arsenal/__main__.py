"""Entry point for the knowledge-arsenal MCP server."""

from knowledge_arsenal.server import create_server


def main() -> None:
    """Run the knowledge-arsenal MCP server."""
    server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
