import os
from fastapi import FastAPI, Request
from .routes import router
from .core import STORE_BACKEND, METRICS_PORT, init_metrics, mongo_startup, shutdown_connections
import logging
from pythonjsonlogger import jsonlogger

# setup structured logging
logger = logging.getLogger('blogcms')
handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())

app = FastAPI(title="Blog CMS API", version="1.0.0")

app.include_router(router, prefix="/api")


@app.get('/healthz')
async def healthz():
    return {'status': 'ok'}


@app.middleware('http')
async def log_requests(request: Request, call_next):
    logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
    response = await call_next(request)
    logger.info({'msg': 'request_end', 'status': response.status_code})
    return response


@app.on_event("startup")
async def startup():
    # Best-effort init, don't block app from starting if a dependency fails
    if METRICS_PORT:
        init_metrics(METRICS_PORT)
    if STORE_BACKEND == 'mongo':
        await mongo_startup()


@app.on_event("shutdown")
async def shutdown():
    await shutdown_connections()
