"""
Entry point for running the finditfast API as a standalone server process.

Logs go to the data directory; the server stops on SIGTERM or when the
parent process writes SHUTDOWN to stdin.
"""

import argparse
import logging
import signal
import sys
import threading

import uvicorn

from finditfast.core.config import settings, ensure_data_dirs


def setup_logging():
    """Setup logging to file in data directory."""
    try:
        ensure_data_dirs()
        logging.basicConfig(
            filename=settings.log_path,
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        logging.info("Server starting. Data dir: %s", settings.data_dir)
        logging.info("DB Path from settings: %s", settings.db_path)
        logging.info(
            "Result cache: ttl=%ss max_entries=%d",
            settings.cache_ttl_seconds, settings.cache_max_entries,
        )
    except OSError as e:
        # If logging setup fails, write to the process stderr
        sys.__stderr__.write(f"Failed to setup logging: {e}\n")


def stdin_listener(server: uvicorn.Server):
    """Listen for a shutdown command from the parent process."""
    for line in sys.stdin:
        if line.strip().upper() == "SHUTDOWN":
            logging.info("Received shutdown command")
            server.should_exit = True
            break


def main():
    setup_logging()
    parser = argparse.ArgumentParser(description="finditfast server")
    parser.add_argument("--host", default=settings.web_host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.web_port, help="Port to bind to")
    args = parser.parse_args()

    logging.info("Starting finditfast server on %s:%s", args.host, args.port)

    from finditfast.web.main import app

    config = uvicorn.Config(
        app,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
    server = uvicorn.Server(config)

    stdin_thread = threading.Thread(target=stdin_listener, args=(server,), daemon=True)
    stdin_thread.start()

    def handle_sigterm(signum, frame):
        logging.info("Received SIGTERM, shutting down...")
        server.should_exit = True

    signal.signal(signal.SIGTERM, handle_sigterm)

    try:
        server.run()
    except KeyboardInterrupt:
        logging.info("Interrupted, shutting down...")
    finally:
        logging.info("Server stopped")


if __name__ == "__main__":
    main()
