#!/usr/bin/env python3
"""
Start the Spot Map API with uvicorn.

    python run.py           # serve
    python run.py --seed    # load sample categories, users and spots, then serve
"""

import argparse
import os

import uvicorn

from app.core.config import settings


def main():
    parser = argparse.ArgumentParser(description="Run the Spot Map API")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", 8000)))
    parser.add_argument("--seed", action="store_true", help="Seed sample data before starting")
    args = parser.parse_args()

    if args.seed:
        from seed_data import create_sample_data
        create_sample_data()

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
