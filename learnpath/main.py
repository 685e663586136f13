# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
import logging
import sys

from learnpath.config import settings
from learnpath.deps import create_mongo_client, create_redis_client
from learnpath.logging_config import setup_logging
from learnpath.middleware.error_handler import ErrorHandlerMiddleware
from learnpath.repos.courses import ensure_indexes as ensure_course_indexes
from learnpath.repos.progress import ensure_indexes as ensure_progress_indexes
from learnpath.routers.health import router as health_router
from learnpath.routers import courses, progress, diagnostics
from learnpath.tasks.scheduler import create_scheduler, schedule_jobs


log_level = "DEBUG" if settings.DEBUG else "INFO"
log_file = "logs/app.log" if settings.ENVIRONMENT == "production" else None
setup_logging(log_level=log_level, log_file=log_file)

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Learnpath API",
    description="Course catalog with per-user progress and sequential unlocking",
    version="1.0.0"
)


@app.on_event("startup")
async def startup():
    logger.info("Starting application...")

    try:
        app.state.mongo_client = create_mongo_client(settings.MONGO_URI)
        app.state.db = app.state.mongo_client.get_default_database()
        logger.info("MongoDB connection established")
    except Exception as e:
        logger.critical(f"Failed to connect to MongoDB: {str(e)}")
        sys.exit(1)

    try:
        app.state.redis = create_redis_client(settings.REDIS_URL)
        await app.state.redis.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.critical(f"Failed to connect to Redis: {str(e)}")
        sys.exit(1)

    try:
        await run_in_threadpool(ensure_course_indexes, app.state.db)
        await run_in_threadpool(ensure_progress_indexes, app.state.db)
        logger.info("Database indexes ensured")
    except Exception as e:
        # not fatal: reads still work without the indexes
        logger.error(f"Failed to ensure database indexes: {str(e)}")

    try:
        app.state.scheduler = create_scheduler()
        schedule_jobs(app.state.scheduler, app.state.db, app.state.redis)
        app.state.scheduler.start()
        logger.info("Scheduler started")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {str(e)}")

    logger.info("Application startup completed successfully")

@app.on_event("shutdown")
async def shutdown():
    logger.info("Starting application shutdown...")

    try:
        if hasattr(app.state, 'scheduler'):
            app.state.scheduler.shutdown(wait=False)
            logger.info("Scheduler shutdown completed")
    except Exception as e:
        logger.error(f"Error shutting down scheduler: {str(e)}")

    try:
        if hasattr(app.state, 'redis'):
            await app.state.redis.close()
            logger.info("Redis connection closed")
    except Exception as e:
        logger.error(f"Error closing Redis connection: {str(e)}")

    try:
        if hasattr(app.state, 'mongo_client'):
            app.state.mongo_client.close()
            logger.info("MongoDB connection closed")
    except Exception as e:
        logger.error(f"Error closing MongoDB connection: {str(e)}")

    logger.info("Application shutdown completed")

# Error handling middleware (should be first)
app.add_middleware(ErrorHandlerMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(courses.router)
app.include_router(progress.router)
app.include_router(diagnostics.router)
