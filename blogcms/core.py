import os
import asyncio
from motor.motor_asyncio import AsyncIOMotorClient
from prometheus_client import Counter, start_http_server
from fastapi import HTTPException
import logging

from .storage import MongoStore, MemoryStore

logger = logging.getLogger(__name__)

STORE_BACKEND = os.getenv('STORE_BACKEND', 'mongo')
MONGO_URL = os.getenv('MONGO_URL', 'mongodb://localhost:27017')
MONGO_DB = os.getenv('MONGO_DB', 'blogCMS')
METRICS_PORT = os.getenv('METRICS_PORT')
MONGO_RETRY_DELAY = 3  # seconds

MONGO = None
STORE = None

AUTH_EVENTS = Counter('blogcms_auth_events_total', 'Registration and login outcomes', ['event', 'outcome'])
CONTENT_WRITES = Counter('blogcms_content_writes_total', 'Posts and comments written', ['kind'])


def init_metrics(port):
    """Initialize Prometheus metrics server"""
    try:
        port = int(port)
        start_http_server(port)
        logger.info({'msg': 'metrics_started', 'port': port})
    except Exception as e:
        logger.warning({'msg': 'metrics_start_failed', 'error': str(e)})


def _mongo_client():
    return AsyncIOMotorClient(
        MONGO_URL,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000,
        socketTimeoutMS=5000,
        maxPoolSize=50,
        retryWrites=True,
        retryReads=True
    )


def build_store():
    """Create the store for the configured backend"""
    global MONGO
    if STORE_BACKEND == 'memory':
        return MemoryStore()
    if STORE_BACKEND != 'mongo':
        raise ValueError(f'unknown STORE_BACKEND: {STORE_BACKEND}')
    if MONGO is None:
        MONGO = _mongo_client()
    return MongoStore(MONGO[MONGO_DB])


async def get_store():
    """FastAPI dependency returning the process-wide store.

    The store is only published once its indexes exist, so a store built
    here after a failed startup still enforces unique usernames.
    """
    global STORE
    if STORE is None:
        store = build_store()
        try:
            await store.setup()
        except Exception as e:
            logger.warning({'msg': 'store_setup_failed', 'backend': STORE_BACKEND, 'error': str(e)})
            raise HTTPException(503, 'storage unavailable')
        STORE = store
        logger.info({'msg': 'store_created', 'backend': STORE_BACKEND})
    return STORE


async def mongo_startup():
    """Connect to MongoDB and create indexes, retrying a few times"""
    global MONGO, STORE

    max_retries = 3

    for attempt in range(max_retries):
        try:
            logger.info({'msg': 'mongo_connect', 'url': MONGO_URL, 'attempt': attempt + 1})
            if MONGO is None:
                MONGO = _mongo_client()

            # Test the connection
            await MONGO.admin.command('ping')

            store = MongoStore(MONGO[MONGO_DB])
            await store.setup()
            STORE = store
            logger.info({'msg': 'mongo_connected', 'db': MONGO_DB})
            return True

        except Exception as e:
            logger.warning({'msg': 'mongo_connect_failed', 'attempt': attempt + 1, 'error': str(e)})
            STORE = None
            if MONGO is not None:
                MONGO.close()
                MONGO = None

            if attempt < max_retries - 1:
                await asyncio.sleep(MONGO_RETRY_DELAY)

    logger.error({'msg': 'mongo_unavailable', 'attempts': max_retries})
    return False


async def shutdown_connections():
    """Close the Mongo client if one was opened"""
    global MONGO, STORE
    if MONGO is not None:
        MONGO.close()
        logger.info({'msg': 'mongo_closed'})
    MONGO = None
    STORE = None
