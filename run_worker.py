"""
Background Worker Runner
Runs the PDC auto-issue sweep and outbox delivery in their own process,
without Redis: python run_worker.py
Set BACKGROUND_TASKS_ENABLED=false on the API when using this.
"""

import asyncio
import logging
import sys

from app.services.scheduler import run_background_tasks

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("🚀 Starting background worker...")
    try:
        asyncio.run(run_background_tasks())
    except KeyboardInterrupt:
        logger.info("👋 Background worker stopped by user")
    except Exception as e:
        logger.error(f"❌ Background worker crashed: {e}")
        sys.exit(1)
