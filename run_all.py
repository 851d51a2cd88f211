#!/usr/bin/env python
"""
Start the AgriHub API and the Chainlit chat front end side by side.
"""

import argparse
import os
import signal
import subprocess
import sys
from typing import List

API_APP = "agrihub.api.server:app"
CHAT_APP = "chainlit_app.py"


def build_commands(port: int, reload: bool = True, with_chat: bool = True) -> List[list]:
    python = sys.executable
    api = [python, "-m", "uvicorn", API_APP, "--port", str(port)]
    if reload:
        api.append("--reload")
    commands = [api]
    if with_chat:
        chat = [python, "-m", "chainlit", "run", CHAT_APP]
        if reload:
            chat.append("--watch")
        commands.append(chat)
    return commands


def stop_all(processes: List[subprocess.Popen]) -> None:
    running = [proc for proc in processes if proc.poll() is None]
    for proc in running:
        proc.terminate()
    for proc in running:
        proc.wait()


def main():
    parser = argparse.ArgumentParser(description="Start the AgriHub API and chat UI")
    parser.add_argument('--port', type=int, default=int(os.getenv("FASTAPI_PORT", "8000")),
                        help='API port (default: FASTAPI_PORT or 8000)')
    parser.add_argument('--api-only', action='store_true', help='do not start the chat UI')
    parser.add_argument('--no-reload', action='store_true', help='disable auto reload')
    args = parser.parse_args()

    env = dict(os.environ)
    # the chat front end reaches the API through BACKEND_URL
    env.setdefault("BACKEND_URL", f"http://localhost:{args.port}")

    processes: List[subprocess.Popen] = []

    def on_signal(signum, frame):
        stop_all(processes)
        sys.exit(0)

    signal.signal(signal.SIGINT, on_signal)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, on_signal)

    for cmd in build_commands(args.port, not args.no_reload, not args.api_only):
        print(f"Starting: {' '.join(cmd)}")
        processes.append(subprocess.Popen(cmd, env=env))

    try:
        for proc in processes:
            proc.wait()
    except KeyboardInterrupt:
        pass
    finally:
        stop_all(processes)


if __name__ == "__main__":
    main()
