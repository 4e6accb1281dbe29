"""Run the API locally.

Tables are created on startup. Point DATABASE_URL at a PostgreSQL instance
(or set it in .env) before starting.

Usage:
    uv run python scripts/serve.py [--host 0.0.0.0] [--port 4000] [--reload]
"""

import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Serve the homelab dashboard API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=4000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    uvicorn.run("homelab.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
