#!/usr/bin/env python3
"""
Storefront Backend Runner
=========================

Run the API server or the background worker.

Usage:
    python run_app.py                    # Development server with auto-reload (default)
    python run_app.py --mode prod        # Production server
    python run_app.py --mode worker      # Celery worker with the beat scheduler
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import os
import subprocess
import sys

def check_environment():
    """Report on the local configuration"""
    if os.path.exists(".env"):
        print(".env file found")
    else:
        print(".env file not found, using defaults")

def run_server(host="0.0.0.0", port=8000, reload=True, workers=1):
    """Run the FastAPI application"""
    print(f"\nStarting Storefront API on {host}:{port}")
    print(f"API Docs: http://localhost:{port}/api/docs")

    import uvicorn
    try:
        uvicorn.run(
            "app.main:app",
            host=host,
            port=port,
            reload=reload,
            workers=None if reload else workers,
            log_level="info"
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")

def run_worker():
    """Run a Celery worker that also schedules the periodic tasks"""
    print("\nStarting Celery worker with beat")
    return subprocess.call([
        sys.executable, "-m", "celery",
        "-A", "app.core.celery_app.celery_app",
        "worker", "-B",
        "-Q", "default,cleanup",
        "--loglevel=info",
    ])

def main():
    parser = argparse.ArgumentParser(
        description="Storefront Backend Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        choices=["dev", "prod", "worker"],
        default="dev",
        help="What to run (default: dev)"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Server processes in prod mode (default: 4)"
    )

    args = parser.parse_args()

    check_environment()

    if args.mode == "worker":
        return run_worker()

    run_server(args.host, args.port, reload=args.mode == "dev", workers=args.workers)
    return 0

if __name__ == "__main__":
    sys.exit(main())
