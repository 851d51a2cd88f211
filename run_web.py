#!/usr/bin/env python
"""
Start the AgriHub FastAPI backend.
"""

import argparse
import logging
import os
import sys

import uvicorn

# make the project root importable when run as a script
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agrihub.infra.config import get_config
from agrihub.observability.logging_utils import init_logging

logger = logging.getLogger(__name__)


def build_parser(default_port: int) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Start the AgriHub FastAPI backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
    python run_web.py                    # settings from .env / environment
    python run_web.py --port 8080        # listen on 8080
    python run_web.py --reload           # auto-reload while developing
        """
    )
    parser.add_argument('--host', default='0.0.0.0', help='bind address (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=default_port,
                        help=f'port (default: {default_port})')
    parser.add_argument('--reload', action='store_true', help='reload on code changes')
    parser.add_argument('--workers', type=int, default=1,
                        help='worker processes, ignored with --reload (default: 1)')
    return parser


def main():
    cfg = get_config()
    args = build_parser(cfg.fastapi_port).parse_args()
    init_logging(log_path=cfg.log_path)

    host = 'localhost' if args.host == '0.0.0.0' else args.host
    logger.info("AgriHub API on http://%s:%s (docs at /docs)", host, args.port)
    logger.info("generative API key configured: %s", bool(cfg.genai_api_key))
    logger.info("news API key configured: %s", bool(cfg.news_api_key))

    uvicorn.run(
        "agrihub.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1 if args.reload else args.workers,
        log_level="info",
    )


if __name__ == '__main__':
    main()
