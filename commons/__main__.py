"""Run the API server: python -m commons [--host HOST] [--port PORT]."""

import argparse
import os

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Commons API server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")))
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()
    uvicorn.run("commons.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
