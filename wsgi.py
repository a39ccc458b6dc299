"""WSGI entry point for the FIRE tracker application."""

import os
import sys
from app import create_app

app = create_app()

if __name__ == "__main__":
    port = 5000

    # PORT environment variable takes precedence over the default
    if "PORT" in os.environ:
        port = int(os.environ["PORT"])

    # --port command line argument
    if len(sys.argv) > 2 and sys.argv[1] == "--port":
        port = int(sys.argv[2])

    debug = os.environ.get("FLASK_ENV", "development") == "development"
    app.run(debug=debug, host="127.0.0.1", port=port)
