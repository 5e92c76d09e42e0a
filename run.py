"""A dev entrypoint for running the ID service."""

import os

from snowgen import create_app

app = create_app(os.getenv("ENV", "development"))

if __name__ == "__main__":
    app.run(port=8888, debug=True)
