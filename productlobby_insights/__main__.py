"""Entry point for the analytics API server and the weekly digest job"""
import argparse
import json
import logging
import sys
import traceback
from dataclasses import asdict
from typing import Optional

from productlobby_insights.config import settings
from productlobby_insights.db import db
from productlobby_insights.services.digest import DigestService
from productlobby_insights.services.email import EmailSender

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s | %(levelname)s | %(name)s | %(message)s')
logger = logging.getLogger(__name__)

def serve() -> None:
    """Run the HTTP API with uvicorn"""
    import uvicorn
    uvicorn.run("productlobby_insights.api:app", host=settings.HOST, port=settings.PORT)

def run_digest(creator_id: Optional[str] = None) -> int:
    """
    Send the weekly digest to every eligible creator, or to one creator.

    Returns:
        Process exit code: 1 when nothing could be processed because of a fatal error
    """
    db.init()
    sender = EmailSender(settings.email_settings)

    try:
        with db.session() as session:
            service = DigestService(
                session,
                sender,
                app_url=settings.APP_URL,
                days_back=settings.DIGEST_DAYS_BACK
            )
            if creator_id:
                result = service.send_digest_to_creator(creator_id)
                output = asdict(result)
                exit_code = 0 if result.digest_sent else 1
            else:
                results = service.send_weekly_creator_digests()
                output = asdict(results)
                exit_code = 1 if any(e.startswith("Fatal error") for e in results.errors) else 0
    finally:
        db.dispose()

    print(json.dumps(output, indent=2))
    return exit_code

def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="productlobby_insights")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("serve", help="Run the analytics API server")
    digest = commands.add_parser("digest", help="Send the weekly creator digest")
    digest.add_argument("--creator", help="Send only to this creator id")
    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            serve()
        else:
            sys.exit(run_digest(args.creator))
    except Exception as e:
        logger.error(f"Error running {args.command}: {e}")
        traceback.print_exc()
        sys.exit(1)

if __name__ == "__main__":
    main()
