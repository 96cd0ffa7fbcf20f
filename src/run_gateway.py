"""
Entry point for the gateway (CGI) run mode.

Point the web server's CGI handler at this file; every request runs it once.
"""
import sys

from dotenv import load_dotenv

load_dotenv()

from service.config import configure_logging
from service.gateway import run_gateway

if __name__ == "__main__":
    # stdout carries the response, log to stderr only
    configure_logging()
    status = run_gateway()
    sys.exit(0 if status < 500 else 1)
