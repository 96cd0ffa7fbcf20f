import os
import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from service.config import configure_logging

log_level = configure_logging()

logging.info("Ledger service starting")
logging.info(f"Log level: {log_level}")

if log_level == 'DEBUG':
    logging.info("DEBUG logging enabled - request setup and procedure calls are traced")

if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))
    if os.getenv("MODE") == "dev":
        logging.info("Running in development mode with auto-reload")
        logging.info(f"Tip: check service health via `curl http://127.0.0.1:{port}/status`.")
        uvicorn.run("service.service:app", reload=True, log_level="info", port=port)
    else:
        logging.info("Running in production mode")
        from service.service import app
        uvicorn.run(app, host="0.0.0.0", port=port)
