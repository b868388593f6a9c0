"""Run the SWAN relay: python -m swan"""

import uvicorn

from swan.config import load_config

config = load_config()
uvicorn.run("swan.app:create_app", host=config.host, port=config.port, factory=True)
