"""Run the instantly-mcp CLI with ``python -m instantly_mcp``."""

from instantly_mcp.cli import app

if __name__ == "__main__":
    app(prog_name="instantly-mcp")
