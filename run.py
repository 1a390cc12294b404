import logging

import uvicorn

from markcrawl.api.server import create_app
from markcrawl.container import Container


def main(container: Container = None):
    container = container or Container()
    logging.basicConfig(
        level=container.config.MARKCRAWL_LOG_LEVEL() or "INFO",
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(container)
    uvicorn.run(
        app,
        host=container.config.MARKCRAWL_HOST(),
        port=int(container.config.MARKCRAWL_PORT()),
    )


if __name__ == '__main__':
    main()
