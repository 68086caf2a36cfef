"""
Registration Chatbot - Main Application Entry Point

AI Assistant Notes:
- serve: run the HTTP API with uvicorn
- interactive: run the registration dialogue in the terminal
- init: create the SQLite schema
- status: check database and language model configuration
"""

from regbot.api.app import build_orchestrator, create_app
from regbot.database.connection import DatabaseConnection
from regbot.database.migrations import DatabaseMigrations
from regbot.exceptions import ConfigurationError, RecordStoreError
from regbot.orchestrator import RegistrationOrchestrator
from regbot.utils import langfuse_client
from regbot.config import settings
import argparse
import asyncio
import sys
import time
import uuid
import logging
from typing import Optional

import uvicorn


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class RegistrationChatbot:
    """
    Main application class for the terminal registration chatbot.
    Handles initialization, the interactive loop, and cleanup.
    """

    def __init__(self):
        """Initialize the chatbot application."""
        self.orchestrator: Optional[RegistrationOrchestrator] = None
        self.db_connection: Optional[DatabaseConnection] = None
        self._cleaned_up = False

    def _generate_user_id(self) -> str:
        """Generate a unique user ID for this interactive session."""
        return f"interactive_user_{uuid.uuid4().hex[:12]}_{int(time.time())}"

    async def initialize(self) -> None:
        """Initialize the database and the orchestrator."""
        logger.info("Initializing registration chatbot...")
        self.db_connection = DatabaseConnection(settings.database_path)
        self.orchestrator = await build_orchestrator(self.db_connection)
        logger.info("Registration chatbot initialized successfully")

    async def run_interactive_mode(self) -> None:
        """Run the registration dialogue in the terminal."""
        user_id = self._generate_user_id()

        print("Registration Chatbot - Interactive Mode")
        print(f"User ID: {user_id}")
        print("Type 'quit' or 'exit' to leave")
        print("-" * 50)

        response = await self.orchestrator.submit_message(user_id, "")
        print(f"\nAssistant: {response.reply}")

        while True:
            try:
                message = input("\nYou: ")
            except EOFError:
                print("\nInput closed. Goodbye!")
                break

            if message.strip().lower() in ['quit', 'exit']:
                print("Goodbye!")
                break

            try:
                response = await self.orchestrator.submit_message(user_id, message)
            except RecordStoreError as e:
                logger.error(f"Registration could not be saved: {e}")
                print(f"\nError: {e.message}")
                break

            print(f"\nAssistant: {response.reply}")

            if response.done:
                print("\nRegistration details:")
                for field, value in response.data.items():
                    print(f"   {field}: {value}")
                break

    async def cleanup(self) -> None:
        """Cleanup resources."""
        if self._cleaned_up:
            return

        try:
            if self.orchestrator and settings.session_idle_eviction_minutes:
                cleaned = self.orchestrator.cleanup_expired_sessions(
                    settings.session_idle_eviction_minutes)
                if cleaned > 0:
                    logger.info(f"Cleaned up {cleaned} idle sessions")

            langfuse_client.flush()

            if self.db_connection:
                self.db_connection.close_all_connections()

            logger.info("Registration chatbot shutdown complete")
        finally:
            self._cleaned_up = True


async def run_command(args: argparse.Namespace) -> int:
    """Run a non-server command and return the exit code."""
    if args.command == 'init':
        db_connection = DatabaseConnection(settings.database_path)
        DatabaseMigrations(db_connection).run_migrations()
        db_connection.close_all_connections()
        print(f"Database initialized at {settings.database_path}")
        return 0

    chatbot = RegistrationChatbot()
    try:
        await chatbot.initialize()

        if args.command == 'interactive':
            await chatbot.run_interactive_mode()

        elif args.command == 'status':
            health = await chatbot.orchestrator.health_check()
            print("Registration Chatbot Status:")
            print(f"  Overall: {health['status']}")
            print(f"  Active sessions: {health['active_sessions']}")
            print(f"  Tables: {', '.join(chatbot.orchestrator.record_store.table_names())}")
            for component, healthy in health['components'].items():
                print(f"    {component}: {'Healthy' if healthy else 'Unhealthy'}")

        return 0

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        print(f"Error: {e.message}")
        return 1
    finally:
        await chatbot.cleanup()


def main():
    """Main entry point for the registration chatbot."""
    parser = argparse.ArgumentParser(description="Registration Chatbot")
    parser.add_argument(
        'command',
        choices=['serve', 'interactive', 'init', 'status'],
        help='Command to execute'
    )
    parser.add_argument('--host', type=str, default=settings.host, help='Host to bind')
    parser.add_argument('--port', type=int, default=settings.port, help='Port to listen on')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    if args.debug:
        settings.debug = True
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == 'serve':
        logger.info(f"Chatbot API listening on port {args.port}")
        uvicorn.run(
            create_app(),
            host=args.host,
            port=args.port,
            log_level="debug" if settings.debug else settings.log_level.lower()
        )
        return

    try:
        sys.exit(asyncio.run(run_command(args)))
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    main()
