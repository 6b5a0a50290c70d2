"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the Data Model (ExplorerState).
2. Instantiates the Main Window (View), which owns the load controller.
3. Passes the Model into the View so they can communicate.

Usage:
    $ python -m happinessviz
"""
import logging
import sys

from happinessviz import config
from happinessviz.app.application import create_app
from happinessviz.logging_config import setup_logging
from happinessviz.model.state import ExplorerState
from happinessviz.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> int:
    # 1. Setup Logging (HAPPINESSVIZ_LOG_LEVEL=DEBUG to see everything)
    setup_logging(level=config.LOG_LEVEL)
    logger.info(f"Reading data from {config.DATA_DIR}")

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the Data Model
    state = ExplorerState()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state)
    window.show()

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
