#!/usr/bin/env python3
import os
import logging
import argparse
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from liveroster import __version__
from liveroster.config import load_roster
from liveroster.models import AppConfig, Member
from liveroster.core import LiveTracker

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(config: AppConfig, members: Iterable[Member]) -> tuple[FastAPI, LiveTracker]:
    """Create FastAPI app and tracker instance"""
    tracker = LiveTracker(config, members)
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await tracker.initialize()
        yield
        await tracker.cleanup()
    
    app = FastAPI(
        title="KPTV Live Roster",
        description="Live stream status for a roster of Twitch and YouTube channels",
        version=__version__,
        lifespan=lifespan
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.state.tracker = tracker
    app.state.store = tracker.store
    
    from liveroster.api.routes import router
    app.include_router(router)
        
    return app, tracker


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser, every flag falls back to its environment variable"""
    env = os.environ.get
    parser = argparse.ArgumentParser(description="Twitch/YouTube live roster")
    parser.add_argument("--twitch-client-id", default=env("TWITCH_CLIENT_ID"), help="Twitch client id")
    parser.add_argument("--twitch-client-secret", default=env("TWITCH_CLIENT_SECRET"), help="Twitch client secret")
    parser.add_argument("--youtube-api-key", default=env("YOUTUBE_API_KEY"), help="YouTube Data API key")
    parser.add_argument("--data-path", default=env("DATA_PATH", "data.yaml"), help="Path to roster file")
    parser.add_argument("--host", default=env("BIND_HOST", "0.0.0.0"), help="Bind host")
    parser.add_argument("--port", type=int, default=int(env("PORT", "3000")), help="Bind port")
    parser.add_argument("--log-level", default=env("LOG_LEVEL", "INFO"), help="Log level")
    parser.add_argument(
        "--cycle-timeout",
        type=float,
        default=float(env("CYCLE_TIMEOUT")) if env("CYCLE_TIMEOUT") else None,
        help="Upper bound in seconds for a whole refresh cycle (disabled by default)"
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> AppConfig:
    """Parse flags and environment into the app config, exits when credentials are missing"""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    missing = [
        flag for flag, value in (
            ("--twitch-client-id", args.twitch_client_id),
            ("--twitch-client-secret", args.twitch_client_secret),
            ("--youtube-api-key", args.youtube_api_key),
        ) if not value
    ]
    if missing:
        parser.error(f"missing required credentials: {', '.join(missing)}")
    
    return AppConfig(
        twitch_client_id=args.twitch_client_id,
        twitch_client_secret=args.twitch_client_secret,
        youtube_api_key=args.youtube_api_key,
        data_path=args.data_path,
        bind_host=args.host,
        bind_port=args.port,
        log_level=args.log_level,
        cycle_timeout=args.cycle_timeout
    )


def main():
    """Main entry point"""
    config = parse_config()
    
    try:
        logging.getLogger().setLevel(getattr(logging, config.log_level.upper()))
        
        members = load_roster(config.data_path)
        app, tracker = create_app(config, members)
        
        logger.info(f"Starting server on {config.bind_host}:{config.bind_port}")
        uvicorn.run(
            app,
            host=config.bind_host,
            port=config.bind_port,
            log_level=config.log_level.lower()
        )
    
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        raise SystemExit(1)
    except Exception as e:
        logger.error(f"Failed to start: {e}")
        raise


if __name__ == "__main__":
    main()
