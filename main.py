"""Azeroth Oracle — dev launcher. Starts the API server in watch mode, or the MCP server."""

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")


def main():
    parser = argparse.ArgumentParser(description="Azeroth Oracle dev launcher")
    parser.add_argument("--mcp", action="store_true",
                        help="Run the MCP link-resolver server on stdio instead of the API")
    parser.add_argument("--port", default=PORT,
                        help=f"API port (default: {PORT})")
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.mcp:
        from wow_oracle.mcp_server import mcp
        mcp.run()
        return

    print(f"Starting API on http://localhost:{args.port} ...")
    proc = subprocess.Popen(
        ["uv", "run", "uvicorn", "wow_oracle.app:app", "--reload",
         "--host", HOST, "--port", str(args.port), "--log-level", LOG_LEVEL.lower()],
        cwd=ROOT,
    )
    try:
        sys.exit(proc.wait())
    except KeyboardInterrupt:
        print("\nShutting down...")
        proc.terminate()
        proc.wait()


if __name__ == "__main__":
    main()
