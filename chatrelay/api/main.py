"""
Server entrypoint for the relay.

Runs `chatrelay.api.http_api:app` under uvicorn with host/port and log level
taken from `chatrelay.llm.provider_config` (`RELAY_HOST`, `PORT`/`RELAY_PORT`,
`LOG_LEVEL`).
"""

import logging

import uvicorn

from chatrelay.llm.provider_config import LOG_LEVEL, RELAY_HOST, RELAY_PORT, setup_logging


logger = logging.getLogger(__name__)


def main():
    setup_logging(LOG_LEVEL)
    logger.info("Server starting on %s:%s", RELAY_HOST, RELAY_PORT)
    uvicorn.run(
        "chatrelay.api.http_api:app",
        host=RELAY_HOST,
        port=RELAY_PORT,
        log_level=LOG_LEVEL.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
