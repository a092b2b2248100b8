"""
Main entrypoint for the YelpCamp web application.

Usage:
    Configure the environment (DATABASEURL, S3_BUCKET, SESSION_SECRET, ...) and run
    `python main.py`, or serve the factory directly with
    `uvicorn yelpcamp.api.app:create_app --factory`.
"""
import logging

import uvicorn

from yelpcamp.api.app import create_app
from yelpcamp.config import Settings

logger = logging.getLogger(__name__)


def main():
    """
    Main function to build the app and start the server.
    """
    try:
        settings = Settings.from_env()
        app = create_app(settings)

        logger.info(f"Server starting on {settings.host}:{settings.port}")
        uvicorn.run(app, host=settings.host, port=settings.port)
        return 0
    except Exception as e:
        logger.error(f"An error occurred in the main function: {str(e)}")
        return 1


if __name__ == "__main__":
    exit_code = main()
    print(f"Exiting with code {exit_code}")
