"""
Start the dashboard API.

    python scripts/run_server.py
    python scripts/run_server.py --host 0.0.0.0 --port 8080 --reload
"""
import argparse
import sys
from pathlib import Path

import uvicorn

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))


def start_server(host: str, port: int, reload: bool = False):
    print("--- TEXAS HVAC ACQUISITION RESEARCH ---")
    print(f"[INFO] API docs:  http://{host}:{port}/docs")
    print(f"[INFO] Dashboard: http://{host}:{port}/dashboard")
    uvicorn.run("hvac_research.web.app:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the HVAC research dashboard")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    start_server(args.host, args.port, args.reload)
