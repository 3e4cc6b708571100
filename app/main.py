from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse

from app.bitrix.api import close_client
from app.bitrix.views import router as bitrix_router
from app.common.api.errors import http_error_handler, iris_error_handler
from app.common.auth import check_api_key
from app.core.config import settings
from app.core.logging import get_logger
from app.dictionary.views import router as dictionary_router
from app.exceptions import IrisError, NotFoundError

logger = get_logger('iris')

# Initialize Logfire
if settings.logfire_token:
    logfire.configure(token=settings.logfire_token)

# Initialize Sentry
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=1.0)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan (startup and shutdown)"""
    logger.info('Starting Iris application')
    if not settings.api_key:
        logger.warning('API_KEY is not set, every /api request will fail with 500')
    if not settings.bitrix_webhook_base:
        logger.warning('BITRIX_WEBHOOK_BASE is not set, Bitrix calls will fail with 500')
    yield
    await close_client()
    logger.info('Shutting down Iris application')


app = FastAPI(
    title='Iris',
    description='Backend-for-frontend proxy in front of the Bitrix24 CRM webhook API',
    version='1.0.0',
    lifespan=lifespan,
)

# The frontend calls us from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.add_exception_handler(IrisError, iris_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)

# Instrument with Logfire
logfire.instrument_fastapi(app)


@app.get('/ping', response_class=PlainTextResponse)
async def ping():
    """Liveness check, no auth"""
    return 'ok'


api_router = APIRouter(prefix='/api', tags=['api'], dependencies=[Depends(check_api_key)])


@api_router.get('/hello', name='hello')
async def hello():
    return {'msg': 'Hola, el servidor funciona 🎉'}


app.include_router(bitrix_router)
app.include_router(dictionary_router)


# Included after the other routers: any /api request that no real route serves still needs the API key.
@api_router.api_route(
    '/{path:path}', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD'], include_in_schema=False
)
async def api_not_found(path: str):
    raise NotFoundError('Not Found')


app.include_router(api_router)


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
